from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from rich.console import Console
from rich.prompt import Prompt

from . import __version__
from .config import Settings, load_settings
from .errors import ConfirmationDeclined, DirmarksError
from .log import LogConfig, get_logger, setup_logging
from .ops import Bookmarks
from .render import frequent_table, make_console, print_pairs, recent_table, stats_table
from .shell import SHELLS, shell_init
from .store import BookmarkStore

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dirmarks",
        description="Bookmark directories by name and jump back to them.",
    )
    p.add_argument("-V", "--version", action="version", version=f"dirmarks {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Env vars override defaults.")
    p.add_argument("--store", default=None, help="Bookmark file to use (overrides DIRMARKS_FILE/config).")
    p.add_argument("--log-level", default=None, help="DEBUG/INFO/WARN/ERROR (overrides env/config).")
    p.add_argument("--no-color", action="store_true", help="Disable colored output.")
    sub = p.add_subparsers(dest="cmd", metavar="COMMAND")

    add = sub.add_parser("add", help="Bookmark PATH under NAME.")
    add.add_argument("name")
    add.add_argument("path")
    add.add_argument("category", nargs="?", default=None)

    st = sub.add_parser("set", help="Bookmark the current directory under NAME.")
    st.add_argument("name")
    st.add_argument("category", nargs="?", default=None)

    to = sub.add_parser("to", help="Print the path of NAME (the shell wrapper cds into it).")
    to.add_argument("name")

    ls = sub.add_parser("list", help="List bookmarks, optionally filtered.")
    ls.add_argument("word", nargs="?", default=None, help="Only names containing WORD.")
    ls.add_argument("-c", "--category", default=None, help="Only bookmarks in CATEGORY (wins over WORD).")

    rn = sub.add_parser("rename", help="Rename a bookmark and/or change its category.")
    rn.add_argument("old_name")
    rn.add_argument("new_name", nargs="?", default=None)
    rn.add_argument("-c", "--category", default=None, help="New category.")

    sub.add_parser("stats", help="Show every bookmark with its usage.")

    rc = sub.add_parser("recent", help="Most recently accessed bookmarks.")
    rc.add_argument("-n", type=int, default=None, help="How many to show (default 10).")

    fq = sub.add_parser("frequent", help="Most frequently accessed bookmarks.")
    fq.add_argument("-n", type=int, default=None, help="How many to show (default 10).")

    rm = sub.add_parser("remove", help="Delete one bookmark.")
    rm.add_argument("name")

    sub.add_parser("clear", help="Delete all bookmarks (asks for confirmation).")

    si = sub.add_parser("shell-init", help="Print the shell function that makes `to` change directory.")
    si.add_argument("shell", nargs="?", default="bash", choices=SHELLS)
    si.add_argument("--name", default="dm", help="Name of the shell function (default: dm).")

    sub.add_parser("help", help="Show this help.")
    return p


def main(argv: List[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if args.cmd in (None, "help"):
        p.print_help()
        return 0

    cfg = load_settings(args.config)
    if args.store:
        cfg.store_path = args.store
    if args.log_level:
        cfg.log_level = args.log_level
    if args.no_color:
        cfg.no_color = True
    setup_logging(LogConfig(level=cfg.log_level, no_color=cfg.no_color))

    if args.cmd == "shell-init":
        sys.stdout.write(shell_init(args.shell, func=args.name))
        return 0

    try:
        return _dispatch(args, cfg)
    except ConfirmationDeclined as e:
        log.info("%s", e)
        return 0
    except DirmarksError as e:
        log.error("%s", e)
        return 1


def _dispatch(args, cfg: Settings) -> int:
    store = BookmarkStore(Path(cfg.store_file)).load()
    ops = Bookmarks(store, confirm=_ask_confirmation, default_category=cfg.default_category)
    console = make_console(cfg.no_color)

    if args.cmd == "add":
        b = ops.add(args.name, args.path, args.category)
        log.info("Added bookmark %s -> %s [%s]", b.name, b.path, b.category)
    elif args.cmd == "set":
        b = ops.set_current(args.name, args.category)
        log.info("Added bookmark %s -> %s [%s]", b.name, b.path, b.category)
    elif args.cmd == "to":
        sys.stdout.write(ops.go_to(args.name) + "\n")
    elif args.cmd == "list":
        if not print_pairs(console, ops.list(category=args.category, word=args.word)):
            log.info("No bookmarks found.")
    elif args.cmd == "rename":
        old = args.old_name
        b = ops.rename(old, args.new_name, args.category)
        log.info("Updated bookmark %s -> %s [%s]", old, b.name, b.category)
    elif args.cmd == "stats":
        rows = ops.stats()
        if not rows:
            log.info("No bookmarks yet.")
        else:
            console.print(stats_table(rows))
    elif args.cmd == "recent":
        rows = ops.recent(args.n if args.n is not None else cfg.recent_limit)
        if not rows:
            log.info("No bookmark has been accessed yet.")
        else:
            console.print(recent_table(rows))
    elif args.cmd == "frequent":
        rows = ops.frequent(args.n if args.n is not None else cfg.frequent_limit)
        if not rows:
            log.info("No bookmarks yet.")
        else:
            console.print(frequent_table(rows))
    elif args.cmd == "remove":
        b = ops.remove(args.name)
        log.info("Removed bookmark %s -> %s", b.name, b.path)
    elif args.cmd == "clear":
        removed = ops.clear()
        log.info("Removed %d bookmarks.", removed)
    else:
        log.error("Unknown command: %s", args.cmd)
        return 2
    return 0


def _ask_confirmation(prompt: str) -> str:
    try:
        return Prompt.ask(prompt, console=Console(stderr=True))
    except EOFError:
        # No interactive input available; treat as a refusal.
        return ""
