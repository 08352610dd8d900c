from __future__ import annotations

import os
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple

from .errors import (
    ConfirmationDeclined,
    DuplicateName,
    InvalidCategory,
    InvalidName,
    InvalidPath,
    MissingArgument,
    NotFound,
)
from .log import get_logger
from .model import DEFAULT_CATEGORY, Bookmark, StatsRow, forbidden_char, last_accessed_display, utc_now
from .store import BookmarkStore

log = get_logger(__name__)

CONFIRM_TOKEN = "yes"

Confirm = Callable[[str], str]


class Bookmarks:
    """Command handlers over a loaded BookmarkStore.

    Each mutating call validates first and saves the whole store afterwards,
    so a rejected call never touches the file.
    """

    def __init__(
        self,
        store: BookmarkStore,
        *,
        confirm: Confirm,
        now: Callable[[], datetime] = utc_now,
        cwd: Callable[[], str] = os.getcwd,
        default_category: str = DEFAULT_CATEGORY,
    ):
        self.store = store
        self.confirm = confirm
        self.now = now
        self.cwd = cwd
        self.default_category = default_category or DEFAULT_CATEGORY

    def add(self, name: str, path: str, category: Optional[str] = None) -> Bookmark:
        _check_name(name)
        if name in self.store:
            raise DuplicateName(name)
        resolved = _check_path(path)
        category = self._category(category)

        b = Bookmark(name=name, path=resolved, category=category)
        self.store.put(b)
        self.store.save()
        log.debug("Added %s -> %s [%s]", name, resolved, category)
        return b

    def set_current(self, name: str, category: Optional[str] = None) -> Bookmark:
        return self.add(name, self.cwd(), category)

    def go_to(self, name: str) -> str:
        b = self._require(name)
        b.touch(self.now())
        self.store.save()
        return b.path

    def list(self, category: Optional[str] = None, word: Optional[str] = None) -> Iterator[Tuple[str, str]]:
        # Category wins when both filters are given.
        for b in self._by_name():
            if category:
                if b.category != category:
                    continue
            elif word and word not in b.name:
                continue
            yield b.name, b.path

    def stats(self) -> List[StatsRow]:
        return [
            StatsRow(b.name, b.path, b.category, last_accessed_display(b), b.access_count)
            for b in self._by_name()
        ]

    def recent(self, n: int = 10) -> List[Bookmark]:
        visited = [b for b in self._by_name() if b.last_accessed is not None]
        # Stable sort keeps the name order among equal timestamps.
        visited.sort(key=lambda b: b.last_accessed, reverse=True)
        return visited[: max(n, 0)]

    def frequent(self, n: int = 10) -> List[Bookmark]:
        rows = self._by_name()
        rows.sort(key=lambda b: b.access_count, reverse=True)
        return rows[: max(n, 0)]

    def remove(self, name: str) -> Bookmark:
        self._require(name)
        b = self.store.pop(name)
        self.store.save()
        return b

    def clear(self) -> int:
        count = len(self.store)
        if count == 0:
            return 0
        answer = self.confirm(f"Delete all {count} bookmarks? Type '{CONFIRM_TOKEN}' to confirm")
        if (answer or "").strip() != CONFIRM_TOKEN:
            raise ConfirmationDeclined("Clear cancelled; no bookmarks were removed.")
        self.store.clear()
        self.store.save()
        return count

    def rename(
        self,
        old_name: str,
        new_name: Optional[str] = None,
        new_category: Optional[str] = None,
    ) -> Bookmark:
        if not old_name:
            raise MissingArgument("rename needs the current bookmark name.")
        if not new_name and not new_category:
            raise MissingArgument("rename needs a new name, a new category (-c), or both.")
        b = self._require(old_name)
        if new_name:
            _check_name(new_name)
            if new_name in self.store:
                raise DuplicateName(new_name)
        if new_category:
            _check_category(new_category)

        if new_name:
            self.store.pop(old_name)
            b.name = new_name
            self.store.put(b)
        if new_category:
            b.category = new_category
        self.store.save()
        return b

    def _require(self, name: str) -> Bookmark:
        b = self.store.get(name)
        if b is None:
            raise NotFound(name)
        return b

    def _by_name(self) -> List[Bookmark]:
        return sorted(self.store.values(), key=lambda b: b.name)

    def _category(self, category: Optional[str]) -> str:
        if not category:
            return self.default_category
        _check_category(category)
        return category


def _check_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidName(name, "must not be empty")
    ch = forbidden_char(name)
    if ch is not None:
        raise InvalidName(name, f"must not contain {ch!r}")


def _check_category(category: str) -> None:
    ch = forbidden_char(category)
    if ch is not None:
        raise InvalidCategory(category, f"must not contain {ch!r}")


def _check_path(path: str) -> str:
    if not path:
        raise InvalidPath(path, "empty path")
    ch = forbidden_char(path)
    if ch is not None:
        raise InvalidPath(path, f"must not contain {ch!r}")
    resolved = os.path.abspath(os.path.expanduser(path))
    if not os.path.exists(resolved):
        raise InvalidPath(path)
    return resolved
