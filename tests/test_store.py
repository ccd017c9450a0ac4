# tests/test_store.py

from skill_system.models import ProgressRecord
from skill_system.store import ProgressStore


def test_put_get_and_remove():
    store = ProgressStore()
    record = store.put(ProgressRecord("a", current_sets=1))

    assert store.get("a") is record
    assert "a" in store
    assert len(store) == 1

    assert store.remove("a") is record
    assert store.remove("a") is None
    assert store.get("a") is None


def test_replace_all_swaps_every_record():
    store = ProgressStore([ProgressRecord("a"), ProgressRecord("b")])
    store.replace_all([ProgressRecord("c")])
    assert list(store) == ["c"]


def test_items_can_be_iterated_while_mutating():
    store = ProgressStore([ProgressRecord("a"), ProgressRecord("b")])
    for skill_id, _ in store.items():
        store.remove(skill_id)
    assert len(store) == 0


def test_snapshot_is_independent():
    store = ProgressStore([ProgressRecord("a", current_sets=1)])
    snapshot = store.snapshot()

    store.get("a").current_sets = 3
    store.put(ProgressRecord("b"))

    assert snapshot.get("a").current_sets == 1
    assert "b" not in snapshot


def test_clear_empties_store():
    store = ProgressStore([ProgressRecord("a")])
    store.clear()
    assert len(store) == 0
