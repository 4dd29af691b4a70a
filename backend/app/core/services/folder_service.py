from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from app.core.models.folder import Folder
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.core.repositories.bookmark_repository import BookmarkRepository
    from app.core.repositories.folder_repository import FolderRepository


logger = get_logger(__name__)


class FolderService:
    """Folder management scoped to one user."""

    def __init__(self, repo: FolderRepository, bookmark_repo: BookmarkRepository) -> None:
        self._repo = repo
        self._bookmarks = bookmark_repo

    async def _check_parent(self, parent_id: UUID | None, user_id: UUID) -> None:
        if parent_id is None:
            return
        parent = await self.get_folder(parent_id, user_id)
        if parent is None:
            raise ValueError("Parent folder not found")

    async def create_folder(self, create_dto, user_id: UUID) -> Folder:
        await self._check_parent(create_dto.parent_id, user_id)
        folder = Folder(
            name=create_dto.name,
            description=create_dto.description,
            parent_id=create_dto.parent_id,
            color=create_dto.color,
            icon=create_dto.icon,
            user_id=user_id,
        )
        return await self._repo.create(folder)

    async def get_folder(self, folder_id: str | UUID, user_id: UUID) -> Folder | None:
        try:
            folder_uuid = UUID(str(folder_id))
        except ValueError:
            return None
        folder = await self._repo.get(folder_uuid)
        if folder and folder.user_id == user_id:
            return folder
        return None

    async def list_folders(self, user_id: UUID) -> Sequence[Folder]:
        return await self._repo.list(user_id=user_id)

    async def folder_tree(self, user_id: UUID) -> list[dict[str, Any]]:
        """Nest folders under their parents with direct bookmark counts.

        Folders whose parent no longer exists are shown at the root.
        """
        folders = await self._repo.list(user_id=user_id)
        counts = await self._bookmarks.folder_counts(user_id=user_id)

        nodes: dict[UUID, dict[str, Any]] = {}
        for folder in folders:
            node = folder.model_dump()
            node["bookmark_count"] = counts.get(folder.id, 0)
            node["subfolders"] = []
            nodes[folder.id] = node

        roots: list[dict[str, Any]] = []
        for folder in folders:
            node = nodes[folder.id]
            parent = nodes.get(folder.parent_id) if folder.parent_id else None
            if parent is None:
                roots.append(node)
            else:
                parent["subfolders"].append(node)
        return roots

    async def update_folder(self, folder_id: str | UUID, update_dto, user_id: UUID) -> Folder | None:
        existing = await self.get_folder(folder_id, user_id)
        if not existing:
            return None

        changes = update_dto.model_dump(exclude_unset=True)
        if "parent_id" in changes:
            parent_id = changes["parent_id"]
            if parent_id is not None and parent_id == existing.id:
                raise ValueError("Folder cannot be its own parent")
            await self._check_parent(parent_id, user_id)
        for key in ("name", "color", "icon"):
            if key in changes and changes[key] is None:
                changes.pop(key)
        if "description" in changes and changes["description"] is None:
            changes["description"] = ""

        return await self._repo.update_fields(existing.id, changes)

    async def delete_folder(self, folder_id: str | UUID, user_id: UUID) -> bool:
        """Delete a folder; its bookmarks and subfolders move to the root."""
        folder = await self.get_folder(folder_id, user_id)
        if not folder:
            return False
        moved = await self._bookmarks.move_folder_to_root(user_id=user_id, folder_id=folder.id)
        reparented = await self._repo.move_children_to_root(user_id=user_id, folder_id=folder.id)
        deleted = await self._repo.delete(folder.id)
        logger.info(
            "Folder deleted",
            extra={"folder_id": str(folder.id), "bookmarks_moved": moved, "subfolders_moved": reparented},
        )
        return deleted
