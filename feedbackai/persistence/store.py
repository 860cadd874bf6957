"""In-memory feedback store.

Holds every feedback record for the lifetime of the process:
- Records ordered newest-first (new items are prepended)
- Monotonic id counter, never reused
- One coarse lock so each mutation completes before the next begins

``FeedbackStore`` is the seam for a durable backing; the query and stats
engines only ever see the snapshot returned by ``list()``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from feedbackai.errors import NoValidFieldsError, NotFoundError
from feedbackai.schemas.feedback import (
    MUTABLE_FIELDS,
    FeedbackCreate,
    FeedbackRecord,
    Status,
)
from feedbackai.validation import validate_update

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


class FeedbackStore(ABC):
    """Storage contract for feedback records."""

    @abstractmethod
    def create(self, fields: FeedbackCreate) -> FeedbackRecord:
        """Insert a new record and return it."""

    @abstractmethod
    def get(self, feedback_id: int) -> FeedbackRecord:
        """Return the record or raise NotFoundError."""

    @abstractmethod
    def update(self, feedback_id: int, changes: Mapping[str, Any]) -> FeedbackRecord:
        """Apply the mutable subset of ``changes`` and return the new record."""

    @abstractmethod
    def delete(self, feedback_id: int) -> FeedbackRecord:
        """Remove the record and return it."""

    @abstractmethod
    def list(self) -> list[FeedbackRecord]:
        """Snapshot of all records, newest first."""


class InMemoryFeedbackStore(FeedbackStore):
    """List-backed store. Lookups are linear scans over the ordered records."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock
        self._records: list[FeedbackRecord] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _index_of(self, feedback_id: int) -> int:
        for i, record in enumerate(self._records):
            if record.id == feedback_id:
                return i
        raise NotFoundError()

    def create(self, fields: FeedbackCreate) -> FeedbackRecord:
        with self._lock:
            now = self._clock()
            record = FeedbackRecord(
                id=self._next_id,
                title=fields.title.strip(),
                description=fields.description.strip(),
                type=fields.type,
                priority=fields.priority,
                email=str(fields.email).strip().lower(),
                status=Status.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._next_id += 1
            self._records.insert(0, record)
        logger.info("Feedback %d created (type=%s)", record.id, record.type.value)
        return record

    def get(self, feedback_id: int) -> FeedbackRecord:
        with self._lock:
            return self._records[self._index_of(feedback_id)]

    def update(self, feedback_id: int, changes: Mapping[str, Any]) -> FeedbackRecord:
        with self._lock:
            index = self._index_of(feedback_id)
            allowed = {k: changes[k] for k in MUTABLE_FIELDS if k in changes}
            if not allowed:
                raise NoValidFieldsError()
            # Validate everything before touching the record
            parsed = validate_update(allowed)
            updates: dict[str, Any] = {
                name: getattr(parsed, name) for name in allowed
            }
            updates["updated_at"] = self._clock()
            record = self._records[index].model_copy(update=updates)
            self._records[index] = record
        logger.info("Feedback %d updated: %s", feedback_id, sorted(allowed))
        return record

    def delete(self, feedback_id: int) -> FeedbackRecord:
        with self._lock:
            record = self._records.pop(self._index_of(feedback_id))
        logger.info("Feedback %d deleted", feedback_id)
        return record

    def list(self) -> list[FeedbackRecord]:
        with self._lock:
            return list(self._records)
