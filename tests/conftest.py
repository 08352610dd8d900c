import sys
from pathlib import Path

import pytest

# Allow `import dirmarks` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolate_home(monkeypatch, tmp_path):
    """Tests must never read or write the real ~/.dirmarks."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "DIRMARKS_FILE",
        "DIRMARKS_DEFAULT_CATEGORY",
        "DIRMARKS_RECENT_LIMIT",
        "DIRMARKS_FREQUENT_LIMIT",
        "DIRMARKS_LOG_LEVEL",
        "DIRMARKS_NO_COLOR",
        "NO_COLOR",
    ):
        monkeypatch.delenv(var, raising=False)
