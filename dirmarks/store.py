from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional

from .errors import CorruptStore, MalformedRecord, StoreUnavailable
from .log import get_logger
from .model import Bookmark

log = get_logger(__name__)

DELIMITER = "|"
FIELD_COUNT = 5
# Layout written by C ctime(), e.g. "Mon Oct 19 13:57:00 2026".
_LEGACY_TS_FORMAT = "%a %b %d %H:%M:%S %Y"


def format_record(b: Bookmark) -> str:
    ts = b.last_accessed.isoformat() if b.last_accessed is not None else ""
    return DELIMITER.join([b.name, b.path, b.category, ts, str(b.access_count)])


def parse_record(line: str) -> Bookmark:
    """Parse one `name|path|category|lastAccessed|accessCount` line.

    Raises MalformedRecord for a wrong field count (callers skip those) and
    CorruptStore for fields that are present but unreadable.
    """
    fields = line.split(DELIMITER)
    if len(fields) != FIELD_COUNT:
        raise MalformedRecord(f"expected {FIELD_COUNT} fields, got {len(fields)}")
    name, path, category, ts, count = fields

    try:
        access_count = int(count)
    except ValueError:
        raise CorruptStore(f"Bookmark {name!r} has a non-numeric access count: {count!r}") from None
    if access_count < 0:
        raise CorruptStore(f"Bookmark {name!r} has a negative access count: {access_count}")

    return Bookmark(
        name=name,
        path=path,
        category=category,
        last_accessed=_parse_timestamp(name, ts),
        access_count=access_count,
    )


def _parse_timestamp(name: str, value: str) -> Optional[datetime]:
    value = value.strip()
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        dt = None
    if dt is not None:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    try:
        legacy = datetime.strptime(value, _LEGACY_TS_FORMAT)
    except ValueError:
        raise CorruptStore(f"Bookmark {name!r} has an unreadable access time: {value!r}") from None
    log.warning("Bookmark %r uses a legacy local-time timestamp; it will be rewritten as ISO-8601.", name)
    return legacy.astimezone().astimezone(timezone.utc)


class BookmarkStore:
    """Name -> Bookmark mapping persisted as a full snapshot file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._items: Dict[str, Bookmark] = {}
        self._corrupt = False

    def load(self) -> "BookmarkStore":
        self._items = {}
        self._corrupt = False
        if not self.path.exists():
            log.debug("No bookmark file at %s yet.", self.path)
            return self

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise StoreUnavailable(f"Cannot read {self.path}: {e}") from e
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            self._corrupt = True
            raise CorruptStore(f"{self.path} is not valid UTF-8: {e}") from None

        skipped = 0
        # Only "\n" ends a record; str.splitlines() would also break on
        # characters such as "\x0c" or "\u2028" that names and paths may hold.
        for lineno, line in enumerate(text.split("\n"), start=1):
            if line.endswith("\r"):
                line = line[:-1]
            if not line.strip():
                continue
            try:
                b = parse_record(line)
            except MalformedRecord as e:
                skipped += 1
                log.warning("Skipping malformed line %d in %s: %s", lineno, self.path, e)
                continue
            except CorruptStore as e:
                self._corrupt = True
                raise CorruptStore(f"{self.path}:{lineno}: {e}") from None
            if b.name in self._items:
                log.warning("Duplicate bookmark %r on line %d in %s; keeping the later one.", b.name, lineno, self.path)
            self._items[b.name] = b

        if skipped:
            log.warning("Skipped %d malformed line(s) in %s; they will be dropped on the next save.", skipped, self.path)
        log.debug("Loaded %d bookmarks from %s", len(self._items), self.path)
        return self

    def save(self) -> None:
        if self._corrupt:
            raise CorruptStore(f"Refusing to overwrite {self.path}: it could not be fully loaded.")

        lines = [format_record(self._items[name]) for name in sorted(self._items)]
        content = "".join(line + "\n" for line in lines)
        try:
            _atomic_write(self.path, content)
        except OSError as e:
            raise StoreUnavailable(f"Cannot write {self.path}: {e}") from e
        log.debug("Saved %d bookmarks to %s", len(lines), self.path)

    def get(self, name: str) -> Optional[Bookmark]:
        return self._items.get(name)

    def put(self, b: Bookmark) -> None:
        self._items[b.name] = b

    def pop(self, name: str) -> Bookmark:
        return self._items.pop(name)

    def clear(self) -> None:
        self._items.clear()

    def values(self) -> Iterable[Bookmark]:
        return self._items.values()

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
