"""Error taxonomy shared by the store, query engine and routes.

Every error that may reach a client derives from ``FeedbackAPIError`` and
knows its HTTP status and the ``{success: false, message}`` body it renders to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldViolation:
    """One failed field rule."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class FeedbackAPIError(Exception):
    """Base class for errors rendered as ``{success: false, message}``."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationFailedError(FeedbackAPIError):
    status_code = 400

    def __init__(
        self, errors: list[FieldViolation], message: str = "Validation failed"
    ) -> None:
        super().__init__(message)
        self.errors = errors

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["errors"] = [e.to_dict() for e in self.errors]
        return body


class NotFoundError(FeedbackAPIError):
    status_code = 404

    def __init__(self, message: str = "Feedback not found") -> None:
        super().__init__(message)


class NoValidFieldsError(FeedbackAPIError):
    status_code = 400

    def __init__(self, message: str = "No valid updates provided") -> None:
        super().__init__(message)


class InvalidQueryError(FeedbackAPIError):
    status_code = 400


class RateLimitedError(FeedbackAPIError):
    status_code = 429

    def __init__(self, message: str, retry_after: int, limit: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after
        self.limit = limit

    def headers(self) -> dict[str, str]:
        return {
            "Retry-After": str(self.retry_after),
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": "0",
        }


class AIProviderError(Exception):
    """External AI provider failed. Always absorbed by the assistant service."""

    def __init__(self, message: str, provider: str = "unknown") -> None:
        self.provider = provider
        super().__init__(message)
