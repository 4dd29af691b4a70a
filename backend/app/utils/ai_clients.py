from __future__ import annotations

from functools import lru_cache

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from app.config import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=64)
def get_openai_client(api_key: str) -> AsyncOpenAI:
    """Return a cached OpenAI client for a user's API key.

    Keys belong to users rather than the deployment, so clients are cached per
    key instead of as a process-wide singleton.
    """
    logger.debug("Initializing OpenAI client for user-supplied key")
    return AsyncOpenAI(
        api_key=api_key,
        timeout=settings.ai_request_timeout,
        max_retries=settings.ai_max_retries,
    )


@lru_cache(maxsize=64)
def get_anthropic_client(api_key: str) -> AsyncAnthropic:
    """Return a cached Anthropic client for a user's API key."""
    logger.debug("Initializing Anthropic client for user-supplied key")
    return AsyncAnthropic(
        api_key=api_key,
        timeout=settings.ai_request_timeout,
        max_retries=settings.ai_max_retries,
    )
