from __future__ import annotations

from typing import TYPE_CHECKING

import openai

from app.config import settings
from app.core.exceptions import ProviderCallError
from app.core.providers.provider import LLMProvider
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = get_logger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completions adapter."""

    name = "openai"

    summary_excerpt_chars = 1000
    tags_excerpt_chars = 1000
    classify_excerpt_chars = 1000

    def __init__(self, client: AsyncOpenAI, *, model: str | None = None) -> None:
        self._client = client
        self._model = model or settings.openai_model

    async def complete(
        self,
        *,
        system: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.OpenAIError as err:
            logger.warning("OpenAI request failed: %s", err, extra={"error_type": type(err).__name__})
            raise ProviderCallError(str(err) or type(err).__name__, provider=self.name) from err

        if not response.choices:
            raise ProviderCallError("OpenAI returned no choices", provider=self.name)
        return (response.choices[0].message.content or "").strip()
