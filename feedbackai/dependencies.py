"""Request-scoped accessors for objects owned by the application."""

from fastapi import Request

from feedbackai.assistant.service import AssistantService
from feedbackai.middleware.rate_limiter import FixedWindowRateLimiter, client_identity
from feedbackai.persistence.store import FeedbackStore


def get_store(request: Request) -> FeedbackStore:
    store: FeedbackStore = request.app.state.store
    return store


def get_assistant(request: Request) -> AssistantService:
    assistant: AssistantService = request.app.state.assistant
    return assistant


def ai_rate_limit(request: Request) -> None:
    """Second, stricter budget stacked on top of the general limiter."""
    limiter: FixedWindowRateLimiter | None = getattr(
        request.app.state, "ai_limiter", None
    )
    if limiter is None:
        return
    limiter.check(client_identity(request, request.app.state.settings.trust_proxy))
