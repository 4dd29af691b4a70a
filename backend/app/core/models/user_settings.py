from __future__ import annotations

from enum import Enum
from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator

from .base import TimestampedModel


class AIProvider(str, Enum):
    """LLM backends a user can choose for content analysis."""

    OPENAI = "openai"
    CLAUDE = "claude"


class UserAISettings(TimestampedModel):
    """Per-user AI configuration. API keys never leave the service."""

    user_id: UUID
    ai_provider: AIProvider = Field(default=AIProvider.OPENAI)
    openai_api_key: str | None = Field(default=None, repr=False)
    anthropic_api_key: str | None = Field(default=None, repr=False)
    has_completed_tour: bool = False

    @field_validator("openai_api_key", "anthropic_api_key")
    @classmethod
    def blank_key_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    def api_key_for(self, provider: AIProvider | str | None = None) -> str | None:
        """Return the stored key for ``provider`` (defaults to the selected one)."""
        selected = provider or self.ai_provider
        if selected == AIProvider.OPENAI:
            return self.openai_api_key
        if selected == AIProvider.CLAUDE:
            return self.anthropic_api_key
        return None

    @property
    def has_any_key(self) -> bool:
        return bool(self.openai_api_key or self.anthropic_api_key)
