from __future__ import annotations

from pydantic import Field

from app.core.models.base import AppBaseModel
from app.core.models.user_settings import AIProvider  # noqa: TCH001


class AISettingsUpdate(AppBaseModel):
    """Partial update of the user's AI configuration.

    An empty string clears a stored key; omitting a field leaves it unchanged.
    """

    ai_provider: AIProvider | None = None
    openai_api_key: str | None = Field(default=None, repr=False)
    anthropic_api_key: str | None = Field(default=None, repr=False)
    has_completed_tour: bool | None = None


class AISettingsRead(AppBaseModel):
    ai_provider: AIProvider
    has_openai_key: bool
    has_anthropic_key: bool
    has_completed_tour: bool
