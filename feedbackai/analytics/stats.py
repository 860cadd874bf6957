"""Aggregate counts and time-windowed trends over feedback records."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from feedbackai.schemas.feedback import FeedbackRecord, FeedbackType, Priority, Status

WEEK = timedelta(days=7)
MONTH = timedelta(days=30)

# Enumeration order doubles as the tie-break order for most_common_type
TYPE_ORDER = [t.value for t in FeedbackType]
DEFAULT_COMMON_TYPE = FeedbackType.FEATURE.value


def _count_by(records: Sequence[FeedbackRecord], attr: str, keys: list[str]) -> dict[str, int]:
    counts = dict.fromkeys(keys, 0)
    for record in records:
        counts[getattr(record, attr).value] += 1
    return counts


def compute_stats(records: Sequence[FeedbackRecord]) -> dict[str, Any]:
    """Counts by status, type and priority. Each group sums to ``total``."""
    return {
        "total": len(records),
        "byStatus": _count_by(records, "status", [s.value for s in Status]),
        "byType": _count_by(records, "type", TYPE_ORDER),
        "byPriority": _count_by(records, "priority", [p.value for p in Priority]),
    }


def status_summary(records: Sequence[FeedbackRecord]) -> dict[str, int]:
    """Flat status counts used alongside list responses."""
    return {"total": len(records), **_count_by(records, "status", [s.value for s in Status])}


def _window(records: Sequence[FeedbackRecord], since: datetime, now: datetime) -> dict[str, int]:
    in_window = [r for r in records if since <= r.created_at < now]
    return {
        "total": len(in_window),
        "resolved": sum(1 for r in in_window if r.status is Status.RESOLVED),
    }


def compute_trends(records: Sequence[FeedbackRecord], now: datetime) -> dict[str, Any]:
    """Weekly (7 day) and monthly (30 day) windows, each ``[now - span, now)``."""
    return {
        "weekly": _window(records, now - WEEK, now),
        "monthly": _window(records, now - MONTH, now),
    }


def resolution_rate(stats: dict[str, Any]) -> int:
    """Resolved share of all items as a rounded percentage."""
    total = stats["total"]
    if not total:
        return 0
    # Half-up, not banker's rounding
    return math.floor(stats["byStatus"][Status.RESOLVED.value] / total * 100 + 0.5)


def most_common_type(stats: dict[str, Any]) -> str:
    by_type: dict[str, int] = stats["byType"]
    best = DEFAULT_COMMON_TYPE
    best_count = 0
    for name in TYPE_ORDER:
        if by_type.get(name, 0) > best_count:
            best, best_count = name, by_type[name]
    return best
