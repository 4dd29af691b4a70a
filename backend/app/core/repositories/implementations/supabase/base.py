from __future__ import annotations

import asyncio
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from collections.abc import Callable

    from supabase import Client


class SupabaseRepository:
    """Shared plumbing for PostgREST-backed repositories.

    The supabase client is blocking, so every query runs in a worker thread.
    """

    TABLE_NAME: str = ""

    # Columns that callers may never overwrite through partial updates
    IMMUTABLE_COLUMNS = frozenset({"id", "user_id", "created_at", "updated_at"})

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    def _table(self):
        return self._client.table(self.TABLE_NAME)

    @staticmethod
    async def _run(func: Callable[[], Any]) -> Any:
        return await asyncio.to_thread(func)

    @staticmethod
    def _first(data: Any) -> dict[str, Any]:
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        return {}

    @staticmethod
    def _to_json(value: Any) -> Any:
        """Convert UUIDs, datetimes and enums into JSON-friendly values for PostgREST."""
        if isinstance(value, UUID):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, list):
            return [SupabaseRepository._to_json(v) for v in value]
        return value

    @classmethod
    def _serialize(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {k: cls._to_json(v) for k, v in data.items()}

    @classmethod
    def _sanitize_changes(cls, changes: dict[str, Any] | None) -> dict[str, Any]:
        return cls._serialize({k: v for k, v in (changes or {}).items() if k not in cls.IMMUTABLE_COLUMNS})
