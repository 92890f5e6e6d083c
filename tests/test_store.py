"""
Unit tests for the in-memory record store
"""

from orbita.services.models import Credential
from orbita.services.store import InMemoryRecordStore


def _credential(project_id="proj-1", label="FTP"):
    return Credential(project_id=project_id, label=label)


def test_put_and_get():
    store = InMemoryRecordStore("credentials")
    record = store.put(_credential())

    assert store.get(record.id) is record
    assert record.id in store
    assert len(store) == 1


def test_put_replaces_by_id():
    store = InMemoryRecordStore()
    record = store.put(_credential(label="old"))
    store.put(record.model_copy(update={"label": "new"}))

    assert store.count() == 1
    assert store.get(record.id).label == "new"


def test_find_by_predicate():
    store = InMemoryRecordStore()
    store.put(_credential("proj-1", "a"))
    store.put(_credential("proj-1", "b"))
    store.put(_credential("proj-2", "c"))

    labels = sorted(r.label for r in store.find(lambda r: r.project_id == "proj-1"))

    assert labels == ["a", "b"]
    assert store.find_one(lambda r: r.project_id == "proj-3") is None


def test_remove_and_clear():
    store = InMemoryRecordStore()
    record = store.put(_credential())

    assert store.remove(record.id) is True
    assert store.remove(record.id) is False
    assert store.get(record.id) is None

    store.put(_credential())
    store.clear()
    assert store.values() == []
