"""Seed demo feedback into a running FeedbackAI API for development.

Usage:
    python scripts/seed_feedback.py [base_url]

Creates a handful of feedback items via POST /feedback, moves a couple of
them along the review workflow, then prints the analytics summary.
"""

import asyncio
import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx

from feedbackai.config import Settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEMO_FEEDBACK = [
    {
        "title": "Login broken",
        "description": "Clicking the login button does nothing on Safari.",
        "type": "bug",
        "priority": "high",
        "email": "alex@example.com",
    },
    {
        "title": "Dark mode",
        "description": "Please add a dark theme for late-night use.",
        "type": "feature",
        "priority": "medium",
        "email": "sam@example.com",
    },
    {
        "title": "Faster search",
        "description": "Search results take several seconds to appear.",
        "type": "improvement",
        "priority": "high",
        "email": "jordan@example.com",
    },
    {
        "title": "Export to CSV",
        "description": "Allow exporting the feedback list as CSV.",
        "type": "feature",
        "priority": "low",
        "email": "casey@example.com",
    },
    {
        "title": "Typo on pricing page",
        "description": "'Anual' should be 'Annual'.",
        "type": "other",
        "priority": "low",
        "email": "riley@example.com",
    },
]

# Index into DEMO_FEEDBACK -> status to apply after creation
STATUS_UPDATES = {0: "resolved", 2: "reviewed"}


async def main():
    settings = Settings()
    base_url = (
        sys.argv[1]
        if len(sys.argv) > 1
        else f"http://localhost:{settings.port}{settings.api_prefix}"
    )

    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        created_ids = []
        for item in DEMO_FEEDBACK:
            resp = await client.post("/feedback", json=item)
            resp.raise_for_status()
            record = resp.json()["data"]
            created_ids.append(record["id"])
            logger.info("Created feedback %d: %s", record["id"], record["title"])

        for index, status in STATUS_UPDATES.items():
            feedback_id = created_ids[index]
            resp = await client.put(f"/feedback/{feedback_id}", json={"status": status})
            resp.raise_for_status()
            logger.info("Feedback %d -> %s", feedback_id, status)

        resp = await client.get("/analytics")
        resp.raise_for_status()
        print(json.dumps(resp.json()["data"], indent=2))


if __name__ == "__main__":
    asyncio.run(main())
