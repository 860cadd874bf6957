"""Analytics endpoint: aggregate stats plus weekly/monthly trends."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from feedbackai.analytics.stats import compute_stats, compute_trends
from feedbackai.dependencies import get_store
from feedbackai.persistence.store import FeedbackStore

router = APIRouter()


@router.get("/analytics")
async def analytics(store: FeedbackStore = Depends(get_store)):
    records = store.list()
    now = datetime.now(timezone.utc)
    return {
        "success": True,
        "data": {
            "stats": compute_stats(records),
            "trends": compute_trends(records, now),
            "generatedAt": now.isoformat(),
        },
    }
