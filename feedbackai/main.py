"""FeedbackAI FastAPI application: store, rate limiters and AI assistant wiring."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from feedbackai.assistant.fallback import FallbackAnswerGenerator
from feedbackai.assistant.providers import AIProvider, build_provider
from feedbackai.assistant.service import AssistantService
from feedbackai.config import Settings, settings as default_settings
from feedbackai.errors import FeedbackAPIError, RateLimitedError
from feedbackai.middleware.audit_logger import AuditLogMiddleware
from feedbackai.middleware.rate_limiter import FixedWindowRateLimiter, RateLimitMiddleware
from feedbackai.middleware.security import (
    INTERNAL_ERROR_BODY,
    BodySizeLimitMiddleware,
    CatchAllErrorMiddleware,
    SecurityHeadersMiddleware,
)
from feedbackai.middleware.usage_tracker import AIUsageMiddleware
from feedbackai.persistence.store import FeedbackStore, InMemoryFeedbackStore
from feedbackai.routes.analytics import router as analytics_router
from feedbackai.routes.assistant import router as assistant_router
from feedbackai.routes.feedback import router as feedback_router
from feedbackai.routes.health import router as health_router

logging.basicConfig(level=default_settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration; close the AI provider on shutdown."""
    cfg: Settings = app.state.settings
    assistant: AssistantService = app.state.assistant
    logger.info("FeedbackAI API server running on port %d", cfg.port)
    logger.info("Health check: http://localhost:%d%s/health", cfg.port, cfg.api_prefix)
    logger.info("AI answers from: %s", assistant.source_name)
    yield

    await assistant.close()
    logger.info("FeedbackAI shutdown: AI provider closed")


async def _api_error_handler(request: Request, exc: FeedbackAPIError) -> JSONResponse:
    headers = exc.headers() if isinstance(exc, RateLimitedError) else None
    return JSONResponse(exc.to_response(), status_code=exc.status_code, headers=headers)


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if any(e.get("type") == "json_invalid" for e in errors):
        return JSONResponse(
            {"success": False, "message": "Invalid JSON body"}, status_code=400
        )
    return JSONResponse(
        {
            "success": False,
            "message": "Invalid request parameters",
            "errors": [
                {"field": str(e["loc"][-1]) if e.get("loc") else "", "message": e["msg"]}
                for e in errors
            ],
        },
        status_code=400,
    )


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code in (404, 405):
        return JSONResponse(
            {"success": False, "message": "Endpoint not found"}, status_code=404
        )
    return JSONResponse(
        {"success": False, "message": str(exc.detail)}, status_code=exc.status_code
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    return JSONResponse(INTERNAL_ERROR_BODY, status_code=500)


def create_app(
    app_settings: Settings | None = None,
    *,
    store: FeedbackStore | None = None,
    provider: AIProvider | None = None,
) -> FastAPI:
    """Build the application. ``store``/``provider`` override the configured ones."""
    cfg = app_settings or default_settings
    store = store if store is not None else InMemoryFeedbackStore()
    if provider is None:
        provider = build_provider(cfg)

    app = FastAPI(title="FeedbackAI API", version=cfg.app_version, lifespan=lifespan)
    app.state.settings = cfg
    app.state.store = store
    app.state.assistant = AssistantService(
        store,
        provider=provider,
        fallback=FallbackAnswerGenerator(cfg.fallback_seed),
        timeout_seconds=cfg.ai_timeout_seconds,
    )

    # Added last = outermost
    app.add_middleware(AuditLogMiddleware)
    app.add_middleware(AIUsageMiddleware)
    if cfg.rate_limit_enabled:
        general_limiter = FixedWindowRateLimiter(
            cfg.general_rate_limit,
            cfg.general_rate_window_seconds,
            "Too many requests from this IP, please try again later.",
        )
        app.state.general_limiter = general_limiter
        app.state.ai_limiter = FixedWindowRateLimiter(
            cfg.ai_rate_limit,
            cfg.ai_rate_window_seconds,
            "Too many AI requests, please try again later.",
        )
        app.add_middleware(
            RateLimitMiddleware, limiter=general_limiter, trust_proxy=cfg.trust_proxy
        )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=cfg.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[cfg.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CatchAllErrorMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(FeedbackAPIError, _api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(health_router, prefix=cfg.api_prefix)
    app.include_router(feedback_router, prefix=cfg.api_prefix)
    app.include_router(assistant_router, prefix=cfg.api_prefix)
    app.include_router(analytics_router, prefix=cfg.api_prefix)
    return app


app = create_app()
