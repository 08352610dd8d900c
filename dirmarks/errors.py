from __future__ import annotations


class DirmarksError(Exception):
    """Base class for failures reported to the user at the command boundary."""


class DuplicateName(DirmarksError):
    def __init__(self, name: str):
        super().__init__(f"Bookmark already exists: {name}")
        self.name = name


class NotFound(DirmarksError):
    def __init__(self, name: str):
        super().__init__(f"No such bookmark: {name}")
        self.name = name


class InvalidPath(DirmarksError):
    def __init__(self, path: str, reason: str = "does not exist"):
        super().__init__(f"Invalid path {path!r}: {reason}")
        self.path = path


class InvalidName(DirmarksError):
    def __init__(self, name: str, reason: str):
        super().__init__(f"Invalid bookmark name {name!r}: {reason}")
        self.name = name


class InvalidCategory(DirmarksError):
    def __init__(self, category: str, reason: str):
        super().__init__(f"Invalid category {category!r}: {reason}")
        self.category = category


class MissingArgument(DirmarksError):
    pass


class CorruptStore(DirmarksError):
    pass


class ConfirmationDeclined(DirmarksError):
    """Raised when a destructive operation was not confirmed; not a failure."""


class MalformedRecord(ValueError):
    """A persisted line without the expected number of fields."""


class StoreUnavailable(DirmarksError):
    """The bookmark file could not be read or written."""
