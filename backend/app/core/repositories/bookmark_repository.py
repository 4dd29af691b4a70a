from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from app.core.models.bookmark import Bookmark
    from app.core.schemas.bookmark_filter import BookmarkFilter


class BookmarkRepository(ABC):
    """Abstract repository interface for bookmarks.

    Contract used by services and dependency injection. Implementations
    perform I/O and therefore expose async methods. Bulk methods are always
    scoped to ``user_id``.
    """

    @abstractmethod
    async def create(self, bookmark: Bookmark) -> Bookmark:  # pragma: no cover - interface only
        """Persist a new bookmark and return the stored entity."""

    @abstractmethod
    async def get(self, bookmark_id: UUID) -> Bookmark | None:  # pragma: no cover
        """Fetch a bookmark by id or return None if not found."""

    @abstractmethod
    async def get_by_url(self, *, user_id: UUID, url: str) -> Bookmark | None:  # pragma: no cover
        """Return the user's bookmark for an already-cleaned URL, if any."""

    @abstractmethod
    async def query(
        self,
        *,
        user_id: UUID,
        filters: BookmarkFilter,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[Bookmark], int]:  # pragma: no cover
        """Return one page of matching bookmarks (newest first) and the total match count."""

    @abstractmethod
    async def recent(self, *, user_id: UUID, limit: int) -> Sequence[Bookmark]:  # pragma: no cover
        """Return the user's most recently created bookmarks."""

    @abstractmethod
    async def list_by_ids(self, *, user_id: UUID, ids: Sequence[UUID]) -> Sequence[Bookmark]:  # pragma: no cover
        """Return the user's bookmarks among ``ids``; unknown ids are ignored."""

    @abstractmethod
    async def list_tag_sets(self, *, user_id: UUID) -> Sequence[list[str]]:  # pragma: no cover
        """Return the tag list of every bookmark the user owns."""

    @abstractmethod
    async def count(self, *, user_id: UUID) -> int:  # pragma: no cover
        """Count the user's bookmarks."""

    @abstractmethod
    async def folder_counts(self, *, user_id: UUID) -> dict[UUID | None, int]:  # pragma: no cover
        """Count the user's bookmarks per folder (None is the root)."""

    @abstractmethod
    async def update_fields(self, bookmark_id: UUID, changes: dict[str, Any]) -> Bookmark | None:  # pragma: no cover
        """Partially update a bookmark and return it, or None if missing."""

    @abstractmethod
    async def update_many(self, *, user_id: UUID, ids: Sequence[UUID], changes: dict[str, Any]) -> int:  # pragma: no cover
        """Apply the same changes to several bookmarks; return how many were updated."""

    @abstractmethod
    async def move_folder_to_root(self, *, user_id: UUID, folder_id: UUID) -> int:  # pragma: no cover
        """Detach every bookmark from ``folder_id``; return how many moved."""

    @abstractmethod
    async def delete(self, bookmark_id: UUID) -> bool:  # pragma: no cover
        """Delete a bookmark by id. Return True if a row was removed."""

    @abstractmethod
    async def delete_many(self, *, user_id: UUID, ids: Sequence[UUID]) -> int:  # pragma: no cover
        """Delete several bookmarks; return how many were removed."""
