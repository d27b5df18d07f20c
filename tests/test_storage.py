from __future__ import annotations

from pathlib import Path

from adapters.sqlite_storage import SQLiteKeyValueStore
from core import keys
from core.registry import CorrespondentRegistry


def _store(tmp_path: Path) -> SQLiteKeyValueStore:
    store = SQLiteKeyValueStore(str(tmp_path / "switchboard.db"))
    store.init_db()
    return store


def test_put_get_delete(tmp_path: Path) -> None:
    store = _store(tmp_path)
    assert store.get("missing") is None

    store.put("a", "1")
    store.put("a", "2")
    assert store.get("a") == "2"

    store.delete("a")
    assert store.get("a") is None
    store.delete("a")


def test_registry_over_sqlite(tmp_path: Path) -> None:
    store = _store(tmp_path)
    registry = CorrespondentRegistry(store)
    registry.bind_thread("42", "100")
    registry.bind_thread("43", "101")
    registry.set_blocked("43", True)

    reopened = CorrespondentRegistry(_store(tmp_path))
    assert reopened.get_thread_for("42") == "100"
    assert reopened.get_correspondent_for("101") == "43"
    assert store.count_keys(keys.THREAD_PREFIX) == 2
    assert store.count_keys(keys.BLOCKED_PREFIX) == 1
