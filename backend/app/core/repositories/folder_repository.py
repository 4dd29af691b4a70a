from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from app.core.models.folder import Folder


class FolderRepository(ABC):
    """Abstract repository interface for bookmark folders."""

    @abstractmethod
    async def create(self, folder: Folder) -> Folder:  # pragma: no cover - interface only
        """Persist a new folder."""

    @abstractmethod
    async def get(self, folder_id: UUID) -> Folder | None:  # pragma: no cover
        """Fetch a folder by id."""

    @abstractmethod
    async def list(self, *, user_id: UUID) -> Sequence[Folder]:  # pragma: no cover
        """Return all folders of a user, ordered by name."""

    @abstractmethod
    async def update_fields(self, folder_id: UUID, changes: dict[str, Any]) -> Folder | None:  # pragma: no cover
        """Partially update a folder and return it, or None if missing."""

    @abstractmethod
    async def move_children_to_root(self, *, user_id: UUID, folder_id: UUID) -> int:  # pragma: no cover
        """Clear ``parent_id`` on every direct subfolder of ``folder_id``."""

    @abstractmethod
    async def delete(self, folder_id: UUID) -> bool:  # pragma: no cover
        """Delete a folder by id."""
