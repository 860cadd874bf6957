"""Response hardening: security headers, request size cap, catch-all errors."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
    "Cross-Origin-Resource-Policy": "same-origin",
}

INTERNAL_ERROR_BODY = {"success": False, "message": "Internal server error"}

BODY_METHODS = ("POST", "PUT", "PATCH")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response: Response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects request bodies larger than ``max_bytes``.

    A declared Content-Length is checked up front. Without one (chunked
    uploads) the body is read here and counted, stopping at the first chunk
    that passes the cap.
    """

    def __init__(self, app, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    def _too_large(self, request: Request, size: int | str) -> JSONResponse:
        logger.warning("Rejected %s bytes body on %s", size, request.url.path)
        return JSONResponse(
            {"success": False, "message": "Request body too large"},
            status_code=413,
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                too_large = int(declared) > self.max_bytes
            except ValueError:
                return JSONResponse(
                    {"success": False, "message": "Invalid Content-Length header"},
                    status_code=400,
                )
            if too_large:
                return self._too_large(request, declared)
        elif request.method in BODY_METHODS:
            chunks: list[bytes] = []
            received = 0
            async for chunk in request.stream():
                received += len(chunk)
                if received > self.max_bytes:
                    return self._too_large(request, f">{self.max_bytes}")
                chunks.append(chunk)
            # Same cache Request.body() fills; handed on to the route
            request._body = b"".join(chunks)
        response: Response = await call_next(request)
        return response


class CatchAllErrorMiddleware(BaseHTTPMiddleware):
    """Turns any unhandled exception into a generic 500 without leaking details."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse(INTERNAL_ERROR_BODY, status_code=500)
        return response
