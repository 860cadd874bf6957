"""Answers free-text questions about the feedback data.

Flow: snapshot the store → ask the external provider (if any) under a
timeout → on any failure or empty answer, use the local fallback generator.
Provider failures are logged and never reach the caller.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from feedbackai.analytics.stats import compute_stats
from feedbackai.assistant.fallback import FallbackAnswerGenerator
from feedbackai.assistant.providers import AIProvider
from feedbackai.persistence.store import FeedbackStore
from feedbackai.schemas.feedback import AIAnswer

logger = logging.getLogger(__name__)


class AssistantService:
    def __init__(
        self,
        store: FeedbackStore,
        provider: AIProvider | None = None,
        fallback: FallbackAnswerGenerator | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.store = store
        self.provider = provider
        self.fallback = fallback or FallbackAnswerGenerator()
        self.timeout_seconds = timeout_seconds

    @property
    def source_name(self) -> str:
        return self.provider.name if self.provider else self.fallback.source

    async def _ask_provider(
        self, provider: AIProvider, question: str, stats: dict
    ) -> str | None:
        try:
            answer = await asyncio.wait_for(
                provider.ask(question, stats), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "AI provider %s timed out after %.1fs, using fallback",
                provider.name, self.timeout_seconds,
            )
            return None
        except Exception as e:
            logger.warning(
                "AI provider %s failed (%s: %s), using fallback",
                provider.name, type(e).__name__, e,
            )
            return None
        if not answer or not answer.strip():
            logger.warning("AI provider %s returned an empty answer", provider.name)
            return None
        return answer

    async def ask(self, question: str) -> AIAnswer:
        answer: str | None = None
        source = self.fallback.source

        if self.provider is not None:
            stats = compute_stats(self.store.list())
            answer = await self._ask_provider(self.provider, question, stats)
            if answer is not None:
                source = self.provider.name

        if answer is None:
            # Re-read so fallback numbers reflect the store after the wait
            answer = self.fallback.generate(question, self.store.list())

        return AIAnswer(
            question=question,
            answer=answer,
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=source,
        )

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.close()
