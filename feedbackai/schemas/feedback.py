"""Feedback record model and request schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class FeedbackType(str, Enum):
    BUG = "bug"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"
    OTHER = "other"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Status(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


# Only these fields may change after creation
MUTABLE_FIELDS = ("status", "priority")


class FeedbackCreate(BaseModel):
    """Validated payload for a new feedback item (strings already trimmed)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    type: FeedbackType
    priority: Priority
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class FeedbackUpdate(BaseModel):
    """Mutable subset of a record. Unset fields are left alone."""

    status: Status | None = None
    priority: Priority | None = None

    @field_validator("status", "priority", mode="before")
    @classmethod
    def _reject_null(cls, value: object) -> object:
        # Defaults are not validated, so this only fires for an explicit null
        if value is None:
            raise ValueError("must not be null")
        return value


class FeedbackRecord(BaseModel):
    """A stored feedback item. Frozen so list snapshots never change underfoot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    description: str
    type: FeedbackType
    priority: Priority
    email: str
    status: Status = Status.PENDING
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AskRequest(BaseModel):
    question: str = Field(min_length=1, max_length=500)

    model_config = ConfigDict(str_strip_whitespace=True)


class AIAnswer(BaseModel):
    question: str
    answer: str
    timestamp: str
    source: str
