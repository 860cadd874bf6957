"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    return {
        "success": True,
        "message": "FeedbackAI API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": request.app.state.settings.app_version,
    }
