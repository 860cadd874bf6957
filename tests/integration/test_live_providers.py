"""Integration tests against live AI providers.

Run with: FEEDBACKAI_INTEGRATION=1 pytest tests/integration -v
Requires: OPENAI_API_KEY and/or ANTHROPIC_API_KEY in environment
"""

import pytest

from feedbackai.assistant.providers import build_provider
from feedbackai.assistant.service import AssistantService
from feedbackai.config import Settings
from feedbackai.persistence.store import InMemoryFeedbackStore
from feedbackai.validation import validate_create


@pytest.fixture
def seeded_store():
    store = InMemoryFeedbackStore()
    store.create(validate_create({
        "title": "Login broken",
        "description": "Click does nothing",
        "type": "bug",
        "priority": "high",
        "email": "user@example.com",
    }))
    return store


@pytest.mark.integration
@pytest.mark.asyncio
@pytest.mark.parametrize("provider_name", ["openai", "anthropic"])
async def test_live_provider_answers(seeded_store, provider_name):
    """A configured provider answers with its own source, not the mock."""
    settings = Settings(ai_provider=provider_name)
    provider = build_provider(settings)
    if provider is None:
        pytest.skip(f"No API key configured for {provider_name}")

    service = AssistantService(
        seeded_store, provider=provider, timeout_seconds=settings.ai_timeout_seconds
    )
    try:
        result = await service.ask("What should we fix first?")
    finally:
        await service.close()

    assert result.source == provider_name
    assert result.answer.strip()
