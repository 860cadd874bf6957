"""Feedback CRUD endpoints with filtering, sorting and pagination."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from feedbackai.analytics.query import FeedbackQuery, run_query, total_pages
from feedbackai.analytics.stats import status_summary
from feedbackai.dependencies import get_store
from feedbackai.errors import NoValidFieldsError, NotFoundError
from feedbackai.persistence.store import FeedbackStore
from feedbackai.validation import validate_create

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_id(raw: str) -> int:
    """Path ids that are not integers can never match a record."""
    try:
        return int(raw)
    except ValueError:
        raise NotFoundError() from None


@router.get("/feedback")
async def list_feedback(
    status: str | None = None,
    type: str | None = None,
    priority: str | None = None,
    page: int = Query(1),
    limit: int = Query(10),
    sort: str = "createdAt",
    order: str = "desc",
    store: FeedbackStore = Depends(get_store),
):
    """List feedback with optional filters; stats always cover the whole store."""
    query = FeedbackQuery(
        status=status,
        type=type,
        priority=priority,
        sort=sort,
        order=order,
        page=page,
        page_size=limit,
    )
    records = store.list()
    result = run_query(records, query)
    return {
        "success": True,
        "data": [r.to_json() for r in result.items],
        "pagination": {
            "currentPage": page,
            "totalPages": total_pages(result.total, limit),
            "totalItems": result.total,
            "itemsPerPage": limit,
        },
        "stats": status_summary(records),
    }


@router.get("/feedback/{feedback_id}")
async def get_feedback(feedback_id: str, store: FeedbackStore = Depends(get_store)):
    record = store.get(_parse_id(feedback_id))
    return {"success": True, "data": record.to_json()}


@router.post("/feedback", status_code=201)
async def create_feedback(
    payload: Any = Body(None), store: FeedbackStore = Depends(get_store)
):
    fields = validate_create(payload)
    record = store.create(fields)
    return JSONResponse(
        {
            "success": True,
            "data": record.to_json(),
            "message": "Feedback created successfully",
        },
        status_code=201,
    )


@router.put("/feedback/{feedback_id}")
async def update_feedback(
    feedback_id: str,
    payload: Any = Body(None),
    store: FeedbackStore = Depends(get_store),
):
    """Update status and/or priority. Unknown keys are ignored."""
    record_id = _parse_id(feedback_id)
    if not isinstance(payload, dict):
        # Still 404 for unknown ids, as with an object body
        store.get(record_id)
        raise NoValidFieldsError()
    record = store.update(record_id, payload)
    return {
        "success": True,
        "data": record.to_json(),
        "message": "Feedback updated successfully",
    }


@router.delete("/feedback/{feedback_id}")
async def delete_feedback(feedback_id: str, store: FeedbackStore = Depends(get_store)):
    record = store.delete(_parse_id(feedback_id))
    return {
        "success": True,
        "data": record.to_json(),
        "message": "Feedback deleted successfully",
    }
