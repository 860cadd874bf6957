"""Shared test fixtures for FeedbackAI unit tests."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from feedbackai.config import Settings
from feedbackai.main import create_app
from feedbackai.persistence.store import InMemoryFeedbackStore
from feedbackai.validation import validate_create

START = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryFeedbackStore(clock=clock)


@pytest.fixture
def valid_payload():
    return {
        "title": "Login broken",
        "description": "Click does nothing",
        "type": "bug",
        "priority": "high",
        "email": "USER@Example.com",
    }


@pytest.fixture
def add(store, clock, valid_payload):
    """Create a record with overrides, advancing the clock a minute first."""

    def _add(advance_minutes: int = 1, status: str | None = None, **overrides):
        clock.advance(minutes=advance_minutes)
        record = store.create(validate_create({**valid_payload, **overrides}))
        if status is not None:
            record = store.update(record.id, {"status": status})
        return record

    return _add


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        ai_provider="none",
        fallback_seed=7,
        openai_api_key="",
        anthropic_api_key="",
    )


@pytest.fixture(autouse=True)
def log_dir(tmp_path, monkeypatch):
    """Send the audit and AI usage logs to a temp dir."""
    monkeypatch.setattr("feedbackai.middleware.audit_logger.LOG_DIR", tmp_path)
    monkeypatch.setattr(
        "feedbackai.middleware.audit_logger.AUDIT_LOG_FILE", tmp_path / "audit_log.jsonl"
    )
    monkeypatch.setattr("feedbackai.middleware.usage_tracker.LOG_DIR", tmp_path)
    monkeypatch.setattr(
        "feedbackai.middleware.usage_tracker.LOG_FILE", tmp_path / "ai_usage_log.jsonl"
    )
    return tmp_path


@pytest.fixture
def client(test_settings, store, log_dir):
    """TestClient over a fresh app; side logs go to a temp dir."""
    app = create_app(test_settings, store=store)
    with TestClient(app) as c:
        yield c
