"""Field-level validation for feedback payloads.

All violations are collected and reported together, never just the first.
Each field gets one human-readable message regardless of which rule failed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from feedbackai.errors import FieldViolation, ValidationFailedError
from feedbackai.schemas.feedback import (
    AskRequest,
    FeedbackCreate,
    FeedbackUpdate,
)

CREATE_MESSAGES: dict[str, str] = {
    "title": "Title must be 1-200 characters",
    "description": "Description must be 1-2000 characters",
    "type": "Invalid feedback type",
    "priority": "Invalid priority level",
    "email": "Valid email is required",
}

UPDATE_MESSAGES: dict[str, str] = {
    "status": "Invalid status",
    "priority": "Invalid priority level",
}

QUESTION_MESSAGES: dict[str, str] = {
    "question": "Question must be 1-500 characters",
}


def _collect(exc: ValidationError, messages: dict[str, str]) -> list[FieldViolation]:
    """Map pydantic errors to one violation per field, in declaration order."""
    failed: set[str] = set()
    for err in exc.errors():
        loc = err.get("loc") or ()
        if loc:
            failed.add(str(loc[0]))
    violations = [
        FieldViolation(field=name, message=msg)
        for name, msg in messages.items()
        if name in failed
    ]
    # Anything pydantic flagged outside the known fields still gets reported
    for name in sorted(failed - set(messages)):
        violations.append(FieldViolation(field=name, message="Invalid value"))
    return violations


def _as_mapping(payload: Any) -> Mapping[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValidationFailedError(
            [FieldViolation(field="body", message="Request body must be a JSON object")]
        )
    return payload


def validate_create(payload: Any) -> FeedbackCreate:
    """Validate a create payload; raise ValidationFailedError listing every bad field."""
    data = _as_mapping(payload)
    fields = {name: data.get(name) for name in CREATE_MESSAGES}
    try:
        return FeedbackCreate.model_validate(fields)
    except ValidationError as exc:
        raise ValidationFailedError(_collect(exc, CREATE_MESSAGES)) from exc


def validate_update(changes: Mapping[str, Any]) -> FeedbackUpdate:
    """Validate the values of mutable fields that are present in ``changes``."""
    fields = {name: changes[name] for name in UPDATE_MESSAGES if name in changes}
    try:
        return FeedbackUpdate.model_validate(fields)
    except ValidationError as exc:
        raise ValidationFailedError(_collect(exc, UPDATE_MESSAGES)) from exc


def validate_question(payload: Any) -> str:
    data = _as_mapping(payload)
    try:
        return AskRequest.model_validate({"question": data.get("question")}).question
    except ValidationError as exc:
        raise ValidationFailedError(_collect(exc, QUESTION_MESSAGES)) from exc
