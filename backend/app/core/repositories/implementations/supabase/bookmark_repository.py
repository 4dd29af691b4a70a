from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from app.core.models.bookmark import Bookmark
from app.core.repositories.bookmark_repository import BookmarkRepository
from app.core.repositories.implementations.supabase.base import SupabaseRepository
from app.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.core.schemas.bookmark_filter import BookmarkFilter

# Characters with meaning inside a PostgREST or=(...) filter expression
_FILTER_UNSAFE = str.maketrans({c: " " for c in ",()%*\\\""})

_PAGE_SIZE = 1000


class SupabaseBookmarkRepository(SupabaseRepository, BookmarkRepository):
    """Supabase implementation of the BookmarkRepository.

    Assumes a `bookmarks` table whose columns match the `Bookmark` model, with
    `tags` stored as a text[] column.
    """

    TABLE_NAME = "bookmarks"

    async def create(self, bookmark: Bookmark) -> Bookmark:
        row = self._bookmark_to_row(bookmark)
        resp = await self._run(lambda: self._table().insert(row).execute())
        return self._row_to_bookmark(self._first(resp.data))

    async def get(self, bookmark_id: UUID) -> Bookmark | None:
        resp = await self._run(
            lambda: self._table()
            .select("*")
            .eq("id", str(bookmark_id))
            .limit(1)
            .execute()
        )
        items = resp.data or []
        return self._row_to_bookmark(items[0]) if items else None

    async def get_by_url(self, *, user_id: UUID, url: str) -> Bookmark | None:
        resp = await self._run(
            lambda: self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .eq("url", url)
            .limit(1)
            .execute()
        )
        items = resp.data or []
        return self._row_to_bookmark(items[0]) if items else None

    async def query(
        self,
        *,
        user_id: UUID,
        filters: BookmarkFilter,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[Bookmark], int]:
        def _query():
            q = self._table().select("*", count="exact").eq("user_id", str(user_id))
            if filters.filter_by_folder:
                if filters.folder_id is None:
                    q = q.is_("folder_id", "null")
                else:
                    q = q.eq("folder_id", str(filters.folder_id))
            if filters.favorite_only:
                q = q.eq("is_favorite", True)
            if filters.category is not None:
                q = q.eq("category", filters.category.value)
            if filters.tags:
                q = q.ov("tags", filters.tags)
            if filters.query:
                term = " ".join(filters.query.translate(_FILTER_UNSAFE).split())
                if term:
                    q = q.or_(
                        f"title.ilike.*{term}*,description.ilike.*{term}*,ai_summary.ilike.*{term}*"
                    )
            return (
                q
                .order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )

        resp = await self._run(_query)
        items = [self._row_to_bookmark(r) for r in (resp.data or [])]
        total = resp.count if resp.count is not None else len(items)
        return items, total

    async def recent(self, *, user_id: UUID, limit: int) -> Sequence[Bookmark]:
        resp = await self._run(
            lambda: self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [self._row_to_bookmark(r) for r in (resp.data or [])]

    async def list_by_ids(self, *, user_id: UUID, ids: Sequence[UUID]) -> Sequence[Bookmark]:
        if not ids:
            return []
        resp = await self._run(
            lambda: self._table()
            .select("*")
            .eq("user_id", str(user_id))
            .in_("id", [str(i) for i in ids])
            .execute()
        )
        return [self._row_to_bookmark(r) for r in (resp.data or [])]

    async def list_tag_sets(self, *, user_id: UUID) -> Sequence[list[str]]:
        tag_sets: list[list[str]] = []
        offset = 0
        while True:
            def _fetch_page(start: int = offset) -> Any:
                return (
                    self._table()
                    .select("tags")
                    .eq("user_id", str(user_id))
                    .range(start, start + _PAGE_SIZE - 1)
                    .execute()
                )

            resp = await self._run(_fetch_page)
            rows: list[dict[str, Any]] = resp.data or []
            for row in rows:
                tags = row.get("tags") or []
                if isinstance(tags, list):
                    tag_sets.append([t for t in tags if isinstance(t, str)])
            if len(rows) < _PAGE_SIZE:
                break
            offset += _PAGE_SIZE
        return tag_sets

    async def count(self, *, user_id: UUID) -> int:
        resp = await self._run(
            lambda: self._table()
            .select("id", count="exact")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        return resp.count or 0

    async def folder_counts(self, *, user_id: UUID) -> dict[UUID | None, int]:
        counts: Counter[UUID | None] = Counter()
        offset = 0
        while True:
            def _fetch_page(start: int = offset) -> Any:
                return (
                    self._table()
                    .select("folder_id")
                    .eq("user_id", str(user_id))
                    .range(start, start + _PAGE_SIZE - 1)
                    .execute()
                )

            resp = await self._run(_fetch_page)
            rows: list[dict[str, Any]] = resp.data or []
            for row in rows:
                folder_id = row.get("folder_id")
                counts[UUID(str(folder_id)) if folder_id else None] += 1
            if len(rows) < _PAGE_SIZE:
                break
            offset += _PAGE_SIZE
        return dict(counts)

    async def update_fields(self, bookmark_id: UUID, changes: dict[str, Any]) -> Bookmark | None:
        sanitized = self._sanitize_changes(changes)
        if not sanitized:
            return await self.get(bookmark_id)
        sanitized["updated_at"] = datetime.now(UTC).isoformat()

        resp = await self._run(
            lambda: self._table()
            .update(sanitized)
            .eq("id", str(bookmark_id))
            .execute()
        )
        items = resp.data or []
        return self._row_to_bookmark(items[0]) if items else None

    async def update_many(self, *, user_id: UUID, ids: Sequence[UUID], changes: dict[str, Any]) -> int:
        sanitized = self._sanitize_changes(changes)
        if not ids or not sanitized:
            return 0
        sanitized["updated_at"] = datetime.now(UTC).isoformat()
        resp = await self._run(
            lambda: self._table()
            .update(sanitized)
            .eq("user_id", str(user_id))
            .in_("id", [str(i) for i in ids])
            .execute()
        )
        return len(resp.data or [])

    async def move_folder_to_root(self, *, user_id: UUID, folder_id: UUID) -> int:
        resp = await self._run(
            lambda: self._table()
            .update({"folder_id": None})
            .eq("user_id", str(user_id))
            .eq("folder_id", str(folder_id))
            .execute()
        )
        return len(resp.data or [])

    async def delete(self, bookmark_id: UUID) -> bool:
        resp = await self._run(
            lambda: self._table()
            .delete()
            .eq("id", str(bookmark_id))
            .execute()
        )
        return len(resp.data or []) > 0

    async def delete_many(self, *, user_id: UUID, ids: Sequence[UUID]) -> int:
        if not ids:
            return 0
        resp = await self._run(
            lambda: self._table()
            .delete()
            .eq("user_id", str(user_id))
            .in_("id", [str(i) for i in ids])
            .execute()
        )
        return len(resp.data or [])

    @staticmethod
    def _row_to_bookmark(row: dict[str, Any]) -> Bookmark:
        normalized = dict(row)
        # Full-text search columns are not part of the model
        normalized.pop("fts", None)
        if normalized.get("tags") is None:
            normalized["tags"] = []
        return Bookmark.model_validate(normalized)

    @classmethod
    def _bookmark_to_row(cls, bookmark: Bookmark) -> dict[str, Any]:
        data = cls._serialize(bookmark.model_dump())
        if data.get("updated_at") is None:
            data.pop("updated_at", None)
        return data
