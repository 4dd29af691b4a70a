from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.core.models.user_settings import UserAISettings
from app.core.repositories.implementations.supabase.base import SupabaseRepository
from app.core.repositories.user_settings_repository import UserSettingsRepository

if TYPE_CHECKING:
    from uuid import UUID


class SupabaseUserSettingsRepository(SupabaseRepository, UserSettingsRepository):
    """Supabase implementation keyed by `user_id` (`user_settings` table).

    RLS must restrict the table to the row owner; API keys are stored here.
    """

    TABLE_NAME = "user_settings"

    async def get(self, user_id: UUID) -> UserAISettings | None:
        resp = await self._run(
            lambda: self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        items = resp.data or []
        return UserAISettings.model_validate(items[0]) if items else None

    async def upsert(self, user_settings: UserAISettings) -> UserAISettings:
        row = self._serialize(user_settings.model_dump())
        row["updated_at"] = datetime.now(UTC).isoformat()
        resp = await self._run(
            lambda: self._table()
            .upsert(row, on_conflict="user_id")
            .execute()
        )
        return UserAISettings.model_validate(self._first(resp.data))
