from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import NamedTuple, Optional

DEFAULT_CATEGORY = "general"
NEVER = "Never"

# Characters that would break the one-record-per-line file format.
FORBIDDEN_CHARS = ("|", "\n", "\r")


@dataclass
class Bookmark:
    name: str
    path: str
    category: str = DEFAULT_CATEGORY
    last_accessed: Optional[datetime] = None
    access_count: int = 0

    def touch(self, when: datetime) -> None:
        self.last_accessed = when
        self.access_count += 1


class StatsRow(NamedTuple):
    name: str
    path: str
    category: str
    last_accessed: str
    access_count: int


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def last_accessed_display(b: Bookmark) -> str:
    if b.last_accessed is None:
        return NEVER
    return b.last_accessed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def forbidden_char(value: str) -> Optional[str]:
    for ch in FORBIDDEN_CHARS:
        if ch in value:
            return ch
    return None
