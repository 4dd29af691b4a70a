from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.core.models.folder import Folder
from app.core.repositories.folder_repository import FolderRepository
from app.core.repositories.implementations.supabase.base import SupabaseRepository

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


class SupabaseFolderRepository(SupabaseRepository, FolderRepository):
    """Supabase implementation of the FolderRepository (`folders` table)."""

    TABLE_NAME = "folders"

    async def create(self, folder: Folder) -> Folder:
        row = self._serialize(folder.model_dump())
        if row.get("updated_at") is None:
            row.pop("updated_at", None)
        resp = await self._run(lambda: self._table().insert(row).execute())
        return Folder.model_validate(self._first(resp.data))

    async def get(self, folder_id: UUID) -> Folder | None:
        resp = await self._run(
            lambda: self._table()
            .select("*")
            .eq("id", str(folder_id))
            .limit(1)
            .execute()
        )
        items = resp.data or []
        return Folder.model_validate(items[0]) if items else None

    async def list(self, *, user_id: UUID) -> Sequence[Folder]:
        resp = await self._run(
            lambda: self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .order("name")
            .execute()
        )
        return [Folder.model_validate(r) for r in (resp.data or [])]

    async def update_fields(self, folder_id: UUID, changes: dict[str, Any]) -> Folder | None:
        sanitized = self._sanitize_changes(changes)
        if not sanitized:
            return await self.get(folder_id)
        sanitized["updated_at"] = datetime.now(UTC).isoformat()
        resp = await self._run(
            lambda: self._table()
            .update(sanitized)
            .eq("id", str(folder_id))
            .execute()
        )
        items = resp.data or []
        return Folder.model_validate(items[0]) if items else None

    async def move_children_to_root(self, *, user_id: UUID, folder_id: UUID) -> int:
        resp = await self._run(
            lambda: self._table()
            .update({"parent_id": None})
            .eq("user_id", str(user_id))
            .eq("parent_id", str(folder_id))
            .execute()
        )
        return len(resp.data or [])

    async def delete(self, folder_id: UUID) -> bool:
        resp = await self._run(
            lambda: self._table()
            .delete()
            .eq("id", str(folder_id))
            .execute()
        )
        return len(resp.data or []) > 0
