"""Unit tests for the in-memory feedback store."""

import threading

import pytest

from feedbackai.errors import NoValidFieldsError, NotFoundError, ValidationFailedError
from feedbackai.persistence.store import InMemoryFeedbackStore
from feedbackai.schemas.feedback import Priority, Status
from feedbackai.validation import validate_create


def test_create_normalizes_and_assigns_first_id(store, valid_payload, clock):
    """Email is trimmed and lowercased; the first id is 1; status starts pending."""
    record = store.create(validate_create({**valid_payload, "email": "  USER@Example.com "}))
    assert record.id == 1
    assert record.email == "user@example.com"
    assert record.status is Status.PENDING
    assert record.created_at == clock.now
    assert record.updated_at == clock.now


def test_create_trims_title_and_description(store, valid_payload):
    record = store.create(
        validate_create({**valid_payload, "title": "  Spaced  ", "description": "\tdesc\n"})
    )
    assert record.title == "Spaced"
    assert record.description == "desc"


def test_ids_strictly_increasing_without_gaps(add):
    ids = [add().id for _ in range(25)]
    assert ids == list(range(1, 26))


def test_ids_not_reused_after_delete(store, add):
    first = add()
    store.delete(first.id)
    assert add().id == first.id + 1


def test_new_records_are_prepended(store, add):
    a = add(title="first")
    b = add(title="second")
    assert [r.id for r in store.list()] == [b.id, a.id]


def test_get_missing_raises(store):
    with pytest.raises(NotFoundError):
        store.get(99)


def test_update_priority_only_changes_priority_and_timestamp(store, add, clock):
    record = add()
    clock.advance(minutes=5)
    updated = store.update(record.id, {"priority": "low"})

    assert updated.priority is Priority.LOW
    assert updated.updated_at == clock.now
    for field in ("id", "title", "description", "type", "email", "status", "created_at"):
        assert getattr(updated, field) == getattr(record, field)


def test_update_ignores_unknown_keys(store, add):
    record = add()
    updated = store.update(record.id, {"status": "reviewed", "title": "hacked"})
    assert updated.status is Status.REVIEWED
    assert updated.title == record.title


def test_update_without_allowed_keys_leaves_record_untouched(store, add):
    record = add()
    with pytest.raises(NoValidFieldsError):
        store.update(record.id, {"title": "x"})
    assert store.get(record.id) == record


def test_update_invalid_value_leaves_record_untouched(store, add):
    record = add()
    with pytest.raises(ValidationFailedError) as exc_info:
        store.update(record.id, {"status": "resolved", "priority": "urgent"})
    assert [e.field for e in exc_info.value.errors] == ["priority"]
    assert store.get(record.id) == record


def test_update_null_value_rejected(store, add):
    record = add()
    with pytest.raises(ValidationFailedError):
        store.update(record.id, {"status": None})


def test_update_missing_record_checked_before_fields(store):
    with pytest.raises(NotFoundError):
        store.update(42, {"title": "x"})


def test_delete_twice(store, add):
    record = add()
    assert store.delete(record.id) == record
    with pytest.raises(NotFoundError):
        store.delete(record.id)


def test_list_is_a_snapshot(store, add):
    record = add()
    snapshot = store.list()
    store.update(record.id, {"status": "resolved"})
    add()
    assert len(snapshot) == 1
    assert snapshot[0].status is Status.PENDING


def test_concurrent_creates_get_unique_ids(valid_payload):
    store = InMemoryFeedbackStore()
    fields = validate_create(valid_payload)
    ids: list[int] = []
    ids_lock = threading.Lock()

    def worker():
        for _ in range(50):
            record = store.create(fields)
            with ids_lock:
                ids.append(record.id)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(ids) == list(range(1, 401))
    assert len(store) == 400
