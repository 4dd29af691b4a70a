from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from app.core.models.user_settings import UserAISettings


class UserSettingsRepository(ABC):
    """Storage for per-user AI provider settings and API keys."""

    @abstractmethod
    async def get(self, user_id: UUID) -> UserAISettings | None:  # pragma: no cover - interface only
        """Return the user's settings row, or None when never saved."""

    @abstractmethod
    async def upsert(self, user_settings: UserAISettings) -> UserAISettings:  # pragma: no cover
        """Insert or replace the user's settings row."""
