"""Per-client fixed-window rate limiting.

Two limiters are configured from settings:
  1. General: 100 requests / 15 min, every route (RateLimitMiddleware)
  2. AI:      10 requests / 1 min, /ai/ask only (route dependency)

A client's window opens on its first request and its counter resets when the
window expires. State is in process memory and resets on restart.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from feedbackai.errors import RateLimitedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the window resets

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }


class _Window:
    __slots__ = ("started", "count")

    def __init__(self, started: float) -> None:
        self.started = started
        self.count = 0


class FixedWindowRateLimiter:
    """Counts requests per key inside fixed windows of ``window_seconds``."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        expired = [
            k for k, w in self._windows.items() if now - w.started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

    def hit(self, key: str) -> RateLimitDecision:
        """Record one request for ``key`` and decide whether it is allowed."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started >= self.window_seconds:
                self._prune(now)
                window = _Window(now)
                self._windows[key] = window
            window.count += 1
            reset_after = max(0.0, window.started + self.window_seconds - now)
            allowed = window.count <= self.limit
            remaining = max(0, self.limit - window.count)
        if not allowed:
            logger.warning(
                "Rate limit exceeded: key=%s count=%d limit=%d",
                key, window.count, self.limit,
            )
        return RateLimitDecision(
            allowed=allowed,
            limit=self.limit,
            remaining=remaining,
            reset_after=reset_after,
        )

    def check(self, key: str) -> RateLimitDecision:
        """Like hit(), but raise RateLimitedError when the budget is spent."""
        decision = self.hit(key)
        if not decision.allowed:
            raise RateLimitedError(
                self.message,
                retry_after=max(1, math.ceil(decision.reset_after)),
                limit=self.limit,
            )
        return decision

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


def client_identity(request: Request, trust_proxy: bool = False) -> str:
    """Key used for rate limiting: the client address."""
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies the general limiter to every request."""

    def __init__(
        self, app, limiter: FixedWindowRateLimiter, trust_proxy: bool = False
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.trust_proxy = trust_proxy

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        key = client_identity(request, self.trust_proxy)
        try:
            decision = self.limiter.check(key)
        except RateLimitedError as e:
            return JSONResponse(
                e.to_response(), status_code=e.status_code, headers=e.headers()
            )
        response: Response = await call_next(request)
        response.headers.update(decision.headers())
        return response
