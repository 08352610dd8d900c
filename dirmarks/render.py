from __future__ import annotations

from typing import Iterable, List, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .model import Bookmark, StatsRow, last_accessed_display


def make_console(no_color: bool = False) -> Console:
    return Console(no_color=no_color, highlight=False)


def print_pairs(console: Console, pairs: Iterable[Tuple[str, str]]) -> int:
    """Plain `name<TAB>path` lines, one per bookmark, easy to pipe into other tools."""
    n = 0
    for name, path in pairs:
        # Bypass rich rendering: it would expand the tab.
        console.file.write(f"{name}\t{path}\n")
        n += 1
    return n


def stats_table(rows: List[StatsRow]) -> Table:
    t = Table(title="Bookmarks")
    t.add_column("Name", style="bold")
    t.add_column("Path")
    t.add_column("Category")
    t.add_column("Last accessed")
    t.add_column("Count", justify="right")
    for r in rows:
        t.add_row(Text(r.name), Text(r.path), Text(r.category), r.last_accessed, str(r.access_count))
    return t


def recent_table(bookmarks: List[Bookmark]) -> Table:
    t = Table(title="Recently accessed")
    t.add_column("Name", style="bold")
    t.add_column("Path")
    t.add_column("Last accessed")
    for b in bookmarks:
        t.add_row(Text(b.name), Text(b.path), last_accessed_display(b))
    return t


def frequent_table(bookmarks: List[Bookmark]) -> Table:
    t = Table(title="Most used")
    t.add_column("Name", style="bold")
    t.add_column("Path")
    t.add_column("Count", justify="right")
    for b in bookmarks:
        t.add_row(Text(b.name), Text(b.path), str(b.access_count))
    return t
