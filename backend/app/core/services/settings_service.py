from __future__ import annotations

from typing import TYPE_CHECKING

from app.core.models.user_settings import AIProvider, UserAISettings
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from uuid import UUID

    from app.core.repositories.user_settings_repository import UserSettingsRepository


logger = get_logger(__name__)

PROVIDER_LABELS = {
    AIProvider.OPENAI: "OpenAI",
    AIProvider.CLAUDE: "Claude",
}


class SettingsService:
    """Reads and updates the user's AI provider choice and API keys."""

    def __init__(self, repo: UserSettingsRepository) -> None:
        self._repo = repo

    async def get_settings(self, user_id: UUID) -> UserAISettings:
        """Stored settings, or defaults when the user never saved any."""
        stored = await self._repo.get(user_id)
        return stored or UserAISettings(user_id=user_id)

    async def update_settings(self, update_dto, user_id: UUID) -> UserAISettings:
        """Merge a partial update and persist it.

        Raises ValueError when the selected provider would end up without a key.
        """
        current = await self.get_settings(user_id)
        changes = update_dto.model_dump(exclude_unset=True)

        merged = current.model_dump()
        for key in ("ai_provider", "has_completed_tour"):
            if changes.get(key) is not None:
                merged[key] = changes[key]
        for key in ("openai_api_key", "anthropic_api_key"):
            if key in changes:
                # Empty string clears the key
                merged[key] = changes[key]

        updated = UserAISettings.model_validate(merged)
        selected_key_field = "openai_api_key" if updated.ai_provider == AIProvider.OPENAI else "anthropic_api_key"
        touches_selection = changes.get("ai_provider") is not None or selected_key_field in changes
        if touches_selection and not updated.api_key_for():
            label = PROVIDER_LABELS.get(updated.ai_provider, str(updated.ai_provider))
            raise ValueError(f"{label} API key is required to use {label} as the AI provider")

        saved = await self._repo.upsert(updated)
        logger.info(
            "AI settings updated",
            extra={"user_id": str(user_id), "ai_provider": saved.ai_provider.value},
        )
        return saved
