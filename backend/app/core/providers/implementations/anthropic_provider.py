from __future__ import annotations

from typing import TYPE_CHECKING

import anthropic

from app.config import settings
from app.core.exceptions import ProviderCallError
from app.core.providers.provider import LLMProvider
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from anthropic import AsyncAnthropic

logger = get_logger(__name__)


class AnthropicProvider(LLMProvider):
    """Anthropic messages-API adapter.

    Claude accepts much longer inputs, so summaries and tags see a larger
    excerpt of the page than with OpenAI.
    """

    name = "claude"

    summary_excerpt_chars = 12000
    tags_excerpt_chars = 12000
    classify_excerpt_chars = 2000

    def __init__(self, client: AsyncAnthropic, *, model: str | None = None) -> None:
        self._client = client
        self._model = model or settings.anthropic_model

    async def complete(
        self,
        *,
        system: str,
        prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> str:
        try:
            message = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AnthropicError as err:
            logger.warning("Anthropic request failed: %s", err, extra={"error_type": type(err).__name__})
            raise ProviderCallError(str(err) or type(err).__name__, provider=self.name) from err

        text = "".join(
            block.text for block in (message.content or []) if getattr(block, "type", None) == "text"
        )
        return text.strip()
