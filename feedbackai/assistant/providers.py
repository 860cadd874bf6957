"""External AI providers for the /ai/ask endpoint.

A provider turns (question, current stats) into answer text or raises.
``build_provider`` picks one from settings; ``None`` means every answer
comes from the local fallback generator.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage
from openai import APIError, AsyncOpenAI
from pydantic import SecretStr

from feedbackai.assistant.prompts import build_system_prompt
from feedbackai.config import Settings
from feedbackai.errors import AIProviderError

logger = logging.getLogger(__name__)

PROVIDER_CHOICES = ("auto", "openai", "anthropic", "none")


class AIProvider(ABC):
    name: str = "unknown"

    @abstractmethod
    async def ask(self, question: str, stats: dict[str, Any]) -> str:
        """Answer ``question`` given aggregate feedback ``stats``."""

    async def close(self) -> None:
        return None


class OpenAIProvider(AIProvider):
    name = "openai"

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        max_tokens: int = 300,
        temperature: float = 0.7,
    ) -> None:
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def ask(self, question: str, stats: dict[str, Any]) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": build_system_prompt(stats)},
                    {"role": "user", "content": question},
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except APIError as e:
            raise AIProviderError(f"OpenAI API error: {e}", provider=self.name) from e
        if not response.choices:
            raise AIProviderError("Chat completion returned no choices", provider=self.name)
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        await self.client.close()


class AnthropicProvider(AIProvider):
    name = "anthropic"

    def __init__(self, model: Any) -> None:
        self.model = model

    async def ask(self, question: str, stats: dict[str, Any]) -> str:
        response = await self.model.ainvoke([
            SystemMessage(content=build_system_prompt(stats)),
            HumanMessage(content=question),
        ])
        content = response.content
        if isinstance(content, str):
            return content
        # Content blocks: keep the text parts
        parts = [
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        ]
        return "".join(parts)


def get_openai_client(settings: Settings) -> AsyncOpenAI:
    # Single attempt; the assistant applies its own timeout and fallback
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=0,
    )


def get_anthropic_model(settings: Settings) -> ChatAnthropic:
    return ChatAnthropic(  # type: ignore[call-arg]
        model_name=settings.anthropic_model,
        anthropic_api_key=SecretStr(settings.anthropic_api_key),
        max_tokens_to_sample=settings.ai_max_tokens,
        temperature=settings.ai_temperature,
        default_request_timeout=settings.ai_timeout_seconds,
    )


def build_provider(settings: Settings) -> AIProvider | None:
    """Select the configured provider, or None for mock-only answers."""
    choice = settings.ai_provider.lower()
    if choice not in PROVIDER_CHOICES:
        logger.warning("Unknown ai_provider %r, using local fallback", choice)
        return None
    if choice == "auto":
        if settings.openai_api_key:
            choice = "openai"
        elif settings.anthropic_api_key:
            choice = "anthropic"
        else:
            choice = "none"

    if choice == "openai":
        if not settings.openai_api_key:
            logger.warning("ai_provider=openai but OPENAI_API_KEY is not set")
            return None
        return OpenAIProvider(
            get_openai_client(settings),
            model=settings.openai_model,
            max_tokens=settings.ai_max_tokens,
            temperature=settings.ai_temperature,
        )
    if choice == "anthropic":
        if not settings.anthropic_api_key:
            logger.warning("ai_provider=anthropic but ANTHROPIC_API_KEY is not set")
            return None
        return AnthropicProvider(get_anthropic_model(settings))
    return None
