"""OpenRouter LLM client factory (OpenAI-compatible SDK)."""
from __future__ import annotations

from typing import Any

from pressroom.config import settings


def get_client() -> Any:
    """Get an AsyncOpenAI client pointed at OpenRouter."""
    from openai import AsyncOpenAI

    base_url = settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"
    return AsyncOpenAI(
        api_key=settings.openrouter_api_key,
        base_url=base_url,
    )


def get_model() -> str:
    """Get the model id used for result analysis."""
    return settings.analysis_model


_client: Any | None = None


def client() -> Any:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client
