"""AI assistant endpoint: answers questions about the aggregate feedback data."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from feedbackai.assistant.service import AssistantService
from feedbackai.dependencies import ai_rate_limit, get_assistant
from feedbackai.validation import validate_question

router = APIRouter()


@router.post("/ai/ask", dependencies=[Depends(ai_rate_limit)])
async def ask(
    request: Request,
    payload: Any = Body(None),
    assistant: AssistantService = Depends(get_assistant),
):
    """Answer via the configured provider, or the local fallback on any failure."""
    question = validate_question(payload)
    request.state.ai_question_chars = len(question)
    answer = await assistant.ask(question)
    request.state.ai_source = answer.source
    return {"success": True, "data": answer.model_dump()}
