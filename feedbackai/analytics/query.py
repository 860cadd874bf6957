"""Filtering, sorting and pagination over a snapshot of feedback records."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from feedbackai.errors import InvalidQueryError
from feedbackai.schemas.feedback import FeedbackRecord, FeedbackType, Priority, Status

ALL = "all"

# Public (JSON) field name -> record attribute
SORT_FIELDS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "type": "type",
    "priority": "priority",
    "email": "email",
    "status": "status",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

SORT_ORDERS = ("asc", "desc")

_FILTERS: dict[str, type[Enum]] = {
    "status": Status,
    "type": FeedbackType,
    "priority": Priority,
}


@dataclass(frozen=True)
class FeedbackQuery:
    status: str | None = None
    type: str | None = None
    priority: str | None = None
    sort: str = "createdAt"
    order: str = "desc"
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class QueryResult:
    items: list[FeedbackRecord]
    total: int


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)


def _check(query: FeedbackQuery) -> dict[str, str]:
    """Validate the query and return the active equality filters."""
    filters: dict[str, str] = {}
    for name, enum_cls in _FILTERS.items():
        value = getattr(query, name)
        if not value or value == ALL:
            continue
        if value not in {m.value for m in enum_cls}:
            raise InvalidQueryError(f"Invalid {name} filter: {value}")
        filters[name] = value
    if query.sort not in SORT_FIELDS:
        raise InvalidQueryError(f"Invalid sort field: {query.sort}")
    if query.order not in SORT_ORDERS:
        raise InvalidQueryError(f"Invalid sort order: {query.order}")
    if query.page < 1:
        raise InvalidQueryError("Page must be a positive integer")
    if query.page_size < 1:
        raise InvalidQueryError("Limit must be a positive integer")
    return filters


def _sort_key(attr: str):
    def key(record: FeedbackRecord) -> Any:
        value = getattr(record, attr)
        if isinstance(value, Enum):
            return value.value
        return value

    return key


def run_query(records: Sequence[FeedbackRecord], query: FeedbackQuery) -> QueryResult:
    """Filter, stably sort and paginate ``records``.

    ``total`` is the filtered count before pagination. A page past the end
    yields an empty item list rather than an error.
    """
    filters = _check(query)

    matched = [
        r
        for r in records
        if all(getattr(r, name).value == value for name, value in filters.items())
    ]

    # sorted() is stable in both directions, so ties keep storage order
    matched = sorted(
        matched,
        key=_sort_key(SORT_FIELDS[query.sort]),
        reverse=query.order == "desc",
    )

    start = (query.page - 1) * query.page_size
    return QueryResult(
        items=matched[start : start + query.page_size],
        total=len(matched),
    )
