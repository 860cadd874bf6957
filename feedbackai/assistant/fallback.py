"""Local answer generator used when no AI provider is available or it fails."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Any

from feedbackai.analytics.stats import compute_stats, most_common_type, resolution_rate
from feedbackai.schemas.feedback import FeedbackRecord, Priority, Status

FALLBACK_SOURCE = "mock"


def _largest_category(stats: dict[str, Any], question: str) -> str:
    return (
        f"Based on your current feedback data ({stats['total']} total items), "
        f"I'd recommend focusing on the {most_common_type(stats)} issues first, "
        "as they represent the largest category."
    )


def _high_priority(stats: dict[str, Any], question: str) -> str:
    return (
        "Looking at your feedback patterns, you have "
        f"{stats['byPriority'][Priority.HIGH.value]} high-priority items that need "
        "immediate attention. Consider addressing these to improve user satisfaction."
    )


def _resolution(stats: dict[str, Any], question: str) -> str:
    return (
        f"Your feedback shows {stats['byStatus'][Status.RESOLVED.value]} resolved "
        f"items out of {stats['total']} total. This {resolution_rate(stats)}% "
        "resolution rate is a good starting point for improvement."
    )


def _echo_question(stats: dict[str, Any], question: str) -> str:
    return (
        f'The question "{question}" suggests you\'re looking for insights. Based on '
        "typical feedback patterns, I'd recommend implementing a systematic approach "
        "to categorize and prioritize issues."
    )


def _ux_research(stats: dict[str, Any], question: str) -> str:
    return (
        "From an AI perspective, your feedback data indicates opportunities for UX "
        "improvements. Consider conducting user interviews to understand the "
        "underlying needs behind the reported issues."
    )


TEMPLATES = [_largest_category, _high_priority, _resolution, _echo_question, _ux_research]


class FallbackAnswerGenerator:
    """Picks one of five templated answers with a seedable RNG.

    Numbers in the answer are computed from the records passed in, so they
    always match the store at the moment of the call.
    """

    source = FALLBACK_SOURCE

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def generate(self, question: str, records: Sequence[FeedbackRecord]) -> str:
        stats = compute_stats(records)
        template = self._rng.choice(TEMPLATES)
        return template(stats, question)
