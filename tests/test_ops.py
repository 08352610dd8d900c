import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from dirmarks.errors import (
    ConfirmationDeclined,
    DuplicateName,
    InvalidCategory,
    InvalidName,
    InvalidPath,
    MissingArgument,
    NotFound,
)
from dirmarks.model import Bookmark
from dirmarks.ops import Bookmarks
from dirmarks.store import BookmarkStore


class _Clock:
    def __init__(self, start: datetime):
        self.t = start

    def __call__(self) -> datetime:
        self.t += timedelta(seconds=1)
        return self.t


def _ops(tmp_path: Path, answer: str = "no", **kw) -> Bookmarks:
    store = BookmarkStore(tmp_path / "marks").load()
    return Bookmarks(store, confirm=lambda _prompt: answer, **kw)


def _reload(ops: Bookmarks) -> BookmarkStore:
    return BookmarkStore(ops.store.path).load()


@pytest.fixture
def dirs(tmp_path: Path):
    out = {}
    for name in ("alpha", "beta", "gamma", "delta", "eps"):
        d = tmp_path / "dirs" / name
        d.mkdir(parents=True)
        out[name] = str(d)
    return out


def test_add_persists_with_defaults(tmp_path, dirs):
    ops = _ops(tmp_path)
    b = ops.add("a", dirs["alpha"])
    assert b == Bookmark("a", dirs["alpha"], "general", None, 0)
    assert _reload(ops).get("a") == b


def test_add_uses_configured_default_category(tmp_path, dirs):
    ops = _ops(tmp_path, default_category="misc")
    assert ops.add("a", dirs["alpha"]).category == "misc"
    assert ops.add("b", dirs["beta"], "").category == "misc"
    assert ops.add("c", dirs["gamma"], "work").category == "work"


def test_add_duplicate_keeps_original(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"])
    with pytest.raises(DuplicateName):
        ops.add("a", dirs["beta"])
    assert _reload(ops).get("a").path == dirs["alpha"]


def test_add_rejects_missing_path(tmp_path):
    ops = _ops(tmp_path)
    with pytest.raises(InvalidPath):
        ops.add("a", str(tmp_path / "does-not-exist"))
    assert len(ops.store) == 0
    assert not ops.store.path.exists()


def test_add_relative_path_is_stored_absolute(tmp_path, dirs, monkeypatch):
    monkeypatch.chdir(Path(dirs["alpha"]).parent)
    ops = _ops(tmp_path)
    assert os.path.samefile(ops.add("a", "alpha").path, dirs["alpha"])


@pytest.mark.parametrize("name", ["", "  ", "a|b", "a\nb"])
def test_add_rejects_bad_names(tmp_path, dirs, name):
    with pytest.raises(InvalidName):
        _ops(tmp_path).add(name, dirs["alpha"])


def test_add_rejects_category_with_delimiter(tmp_path, dirs):
    with pytest.raises(InvalidCategory):
        _ops(tmp_path).add("a", dirs["alpha"], "x|y")


def test_names_are_case_sensitive(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("Proj", dirs["alpha"])
    ops.add("proj", dirs["beta"])
    assert sorted(ops.store) == ["Proj", "proj"]


def test_set_current_uses_working_directory(tmp_path, dirs):
    ops = _ops(tmp_path, cwd=lambda: dirs["gamma"])
    b = ops.set_current("here", "work")
    assert (b.path, b.category) == (dirs["gamma"], "work")
    with pytest.raises(DuplicateName):
        ops.set_current("here")


def test_go_to_updates_metadata_once(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"])
    start = datetime.now(timezone.utc)

    assert ops.go_to("a") == dirs["alpha"]

    b = _reload(ops).get("a")
    assert b.access_count == 1
    assert b.last_accessed is not None and b.last_accessed >= start

    ops.go_to("a")
    assert _reload(ops).get("a").access_count == 2


def test_go_to_missing_is_not_found(tmp_path):
    with pytest.raises(NotFound):
        _ops(tmp_path).go_to("nope")


def test_go_to_does_not_revalidate_path(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"])
    Path(dirs["alpha"]).rmdir()
    assert ops.go_to("a") == dirs["alpha"]


def test_list_filters(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("web-api", dirs["alpha"], "work")
    ops.add("web-ui", dirs["beta"], "work")
    ops.add("notes", dirs["gamma"], "home")

    assert list(ops.list()) == [
        ("notes", dirs["gamma"]),
        ("web-api", dirs["alpha"]),
        ("web-ui", dirs["beta"]),
    ]
    assert [n for n, _ in ops.list(word="web")] == ["web-api", "web-ui"]
    assert [n for n, _ in ops.list(category="home")] == ["notes"]
    # Category takes precedence over the word filter.
    assert [n for n, _ in ops.list(category="home", word="web")] == ["notes"]
    assert list(ops.list(category="nothing")) == []


def test_stats_rows_and_never_sentinel(tmp_path, dirs):
    ops = _ops(tmp_path)
    assert ops.stats() == []
    ops.add("b", dirs["beta"], "work")
    ops.add("a", dirs["alpha"])
    ops.go_to("b")

    rows = ops.stats()
    assert [r.name for r in rows] == ["a", "b"]
    assert rows[0].last_accessed == "Never"
    assert rows[0].access_count == 0
    assert rows[1].last_accessed != "Never"
    assert (rows[1].path, rows[1].category, rows[1].access_count) == (dirs["beta"], "work", 1)


def test_recent_excludes_never_accessed(tmp_path, dirs):
    ops = _ops(tmp_path, now=_Clock(datetime(2026, 1, 1, tzinfo=timezone.utc)))
    for name in ("alpha", "beta", "gamma"):
        ops.add(name, dirs[name])
    ops.go_to("alpha")
    ops.go_to("gamma")

    assert [b.name for b in ops.recent(10)] == ["gamma", "alpha"]
    assert [b.name for b in ops.recent(1)] == ["gamma"]


def test_recent_ties_broken_by_name(tmp_path, dirs):
    fixed = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ops = _ops(tmp_path, now=lambda: fixed)
    for name in ("gamma", "alpha", "beta"):
        ops.add(name, dirs[name])
        ops.go_to(name)
    assert [b.name for b in ops.recent()] == ["alpha", "beta", "gamma"]


def test_frequent_orders_by_count_then_name(tmp_path, dirs):
    ops = _ops(tmp_path)
    counts = {"eps": 5, "gamma": 3, "beta": 3, "delta": 1, "alpha": 0}
    for name, n in counts.items():
        ops.add(name, dirs[name])
        for _ in range(n):
            ops.go_to(name)

    assert [b.name for b in ops.frequent(3)] == ["eps", "beta", "gamma"]
    assert [b.name for b in ops.frequent()][-1] == "alpha"


def test_remove(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"])
    ops.add("b", dirs["beta"])

    with pytest.raises(NotFound):
        ops.remove("missing")
    assert [n for n, _ in ops.list()] == ["a", "b"]

    ops.remove("a")
    assert list(_reload(ops)) == ["b"]


def test_clear_declined_keeps_everything(tmp_path, dirs):
    ops = _ops(tmp_path, answer="no")
    ops.add("a", dirs["alpha"])
    ops.add("b", dirs["beta"])
    with pytest.raises(ConfirmationDeclined):
        ops.clear()
    assert sorted(_reload(ops)) == ["a", "b"]


@pytest.mark.parametrize("answer", ["YES", "y", "Yes", ""])
def test_clear_needs_exact_yes(tmp_path, dirs, answer):
    ops = _ops(tmp_path, answer=answer)
    ops.add("a", dirs["alpha"])
    with pytest.raises(ConfirmationDeclined):
        ops.clear()
    assert len(ops.store) == 1


def test_clear_confirmed_empties_store(tmp_path, dirs):
    prompts = []

    def confirm(prompt):
        prompts.append(prompt)
        return "yes"

    ops = Bookmarks(BookmarkStore(tmp_path / "marks").load(), confirm=confirm)
    ops.add("a", dirs["alpha"])
    ops.add("b", dirs["beta"])
    assert ops.clear() == 2
    assert len(_reload(ops)) == 0
    assert len(prompts) == 1


def test_clear_on_empty_store_does_not_prompt(tmp_path):
    def confirm(_prompt):
        raise AssertionError("should not prompt")

    ops = Bookmarks(BookmarkStore(tmp_path / "marks").load(), confirm=confirm)
    assert ops.clear() == 0


def test_rename_moves_key_and_keeps_fields(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"], "work")
    ops.go_to("a")
    before = ops.store.get("a")
    snapshot = (before.path, before.category, before.access_count, before.last_accessed)

    ops.rename("a", new_name="b")

    reloaded = _reload(ops)
    assert "a" not in reloaded
    b = reloaded.get("b")
    assert (b.path, b.category, b.access_count, b.last_accessed) == snapshot


def test_rename_category_only(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"])
    ops.rename("a", new_category="home")
    assert _reload(ops).get("a").category == "home"


def test_rename_name_and_category(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"])
    b = ops.rename("a", "b", "home")
    assert (b.name, b.category) == ("b", "home")
    assert list(_reload(ops)) == ["b"]


def test_rename_errors_leave_store_untouched(tmp_path, dirs):
    ops = _ops(tmp_path)
    ops.add("a", dirs["alpha"])
    ops.add("b", dirs["beta"])

    with pytest.raises(MissingArgument):
        ops.rename("a")
    with pytest.raises(MissingArgument):
        ops.rename("", "c")
    with pytest.raises(NotFound):
        ops.rename("zzz", "c")
    with pytest.raises(DuplicateName):
        ops.rename("a", "b", "home")
    with pytest.raises(InvalidName):
        ops.rename("a", "c|d")

    reloaded = _reload(ops)
    assert sorted(reloaded) == ["a", "b"]
    assert reloaded.get("a").category == "general"
