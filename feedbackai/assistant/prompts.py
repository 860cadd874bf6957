"""System prompt for the feedback insights assistant."""

import json
from typing import Any

FEEDBACK_ANALYST_SYSTEM_PROMPT = """\
You are an AI assistant specialized in analyzing feedback data and providing \
insights for product management. You help teams understand feedback patterns, \
prioritize features, and improve user experience. Current feedback stats: {stats}"""


def build_system_prompt(stats: dict[str, Any]) -> str:
    return FEEDBACK_ANALYST_SYSTEM_PROMPT.format(stats=json.dumps(stats))
