"""Feedback mutation audit logging middleware: logs create/update/delete to JSONL."""

import json
import logging
import re
import time
from pathlib import Path

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from feedbackai.config import settings

logger = logging.getLogger(__name__)

LOG_DIR = Path(settings.log_dir)
AUDIT_LOG_FILE = LOG_DIR / "audit_log.jsonl"

MUTATING_METHODS = {"POST", "PUT", "DELETE"}
_FEEDBACK_PATH = re.compile(r"/feedback(?:/(?P<id>[^/]+))?/?$")


class AuditLogMiddleware(BaseHTTPMiddleware):
    """Logs one entry per POST/PUT/DELETE on the feedback routes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        match = _FEEDBACK_PATH.search(request.url.path)
        if request.method not in MUTATING_METHODS or match is None:
            response: Response = await call_next(request)
            return response

        response = await call_next(request)

        entry = {
            "timestamp": time.time(),
            "method": request.method,
            "path": request.url.path,
            "feedback_id": match.group("id"),
            "client": request.client.host if request.client else None,
            "status_code": response.status_code,
        }
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            with open(AUDIT_LOG_FILE, "a") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError:
            logger.warning("Could not write audit log entry")

        return response
