"""AI usage log: one JSONL entry per /ai/ask call, recording who answered.

The route leaves the answer source and question length on ``request.state``;
the configured provider comes from the app's assistant. Together they show
how often the external provider answered and how often the local fallback
had to step in.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from feedbackai.assistant.fallback import FALLBACK_SOURCE
from feedbackai.config import settings

logger = logging.getLogger(__name__)

LOG_DIR = Path(settings.log_dir)
LOG_FILE = LOG_DIR / "ai_usage_log.jsonl"

AI_PATH_SUFFIX = "/ai/ask"


def _configured_provider(request: Request) -> str | None:
    assistant = getattr(request.app.state, "assistant", None)
    if assistant is None or assistant.provider is None:
        return None
    name: str = assistant.provider.name
    return name


def usage_entry(request: Request, status_code: int, elapsed: float) -> dict[str, Any]:
    """Build the log entry for one AI request."""
    provider = _configured_provider(request)
    source = getattr(request.state, "ai_source", None)
    fallback_used = source == FALLBACK_SOURCE
    return {
        "timestamp": time.time(),
        "status_code": status_code,
        "elapsed_seconds": round(elapsed, 3),
        "provider": provider,
        "source": source,
        "fallback_used": fallback_used,
        # Configured provider timed out, raised, or answered empty
        "provider_failed": provider is not None and fallback_used,
        "question_chars": getattr(request.state, "ai_question_chars", None),
        "rate_limited": status_code == 429,
    }


class AIUsageMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST" or not request.url.path.rstrip("/").endswith(
            AI_PATH_SUFFIX
        ):
            response: Response = await call_next(request)
            return response

        start = time.monotonic()
        response = await call_next(request)
        entry = usage_entry(request, response.status_code, time.monotonic() - start)

        if entry["provider_failed"]:
            logger.info("AI answer served by fallback; provider %s failed", entry["provider"])
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            with open(LOG_FILE, "a") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError:
            logger.warning("Could not write AI usage log entry")

        return response
