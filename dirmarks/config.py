from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


def _coerce(current, value):
    """Fit a YAML value to the type of the setting it overrides; bad values keep the current one."""
    if value is None:
        return current
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("1", "true", "yes", "y", "on")
    if isinstance(current, int):
        try:
            return int(value)
        except (TypeError, ValueError):
            return current
    text = str(value)
    return text if text else current


def _default_store_path() -> str:
    return str(Path(os.path.expanduser("~")) / ".dirmarks")


@dataclass
class Settings:
    # Storage
    store_path: str = ""

    # Bookmarks
    default_category: str = "general"
    recent_limit: int = 10
    frequent_limit: int = 10

    # Logging / UX
    log_level: str = "INFO"
    no_color: bool = False

    def __post_init__(self) -> None:
        if not self.store_path:
            self.store_path = _default_store_path()

    @property
    def store_file(self) -> Path:
        return Path(os.path.expanduser(self.store_path))

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        s.store_path = _env_str("DIRMARKS_FILE", s.store_path) or s.store_path
        s.default_category = _env_str("DIRMARKS_DEFAULT_CATEGORY", s.default_category) or s.default_category
        s.recent_limit = _env_int("DIRMARKS_RECENT_LIMIT", s.recent_limit)
        s.frequent_limit = _env_int("DIRMARKS_FREQUENT_LIMIT", s.frequent_limit)

        s.log_level = _env_str("DIRMARKS_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("DIRMARKS_NO_COLOR", s.no_color)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        s = Settings.from_env()
        for k, v in data.items():
            if k in _FIELD_NAMES:
                setattr(s, k, _coerce(getattr(s, k), v))
        return s


_FIELD_NAMES = frozenset(f.name for f in fields(Settings))


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    return Settings.from_env()
