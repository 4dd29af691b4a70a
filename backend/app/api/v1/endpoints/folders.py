from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TCH003

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.v1.schemas.folder import FolderCreate, FolderNode, FolderRead, FolderUpdate
from app.dependencies import get_current_user, get_folder_service
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from app.core.schemas.auth import AuthUser
    from app.core.services.folder_service import FolderService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/", response_model=FolderRead, status_code=status.HTTP_201_CREATED)
async def create_folder(
    payload: FolderCreate,
    current_user: AuthUser = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service),
):
    try:
        folder = await service.create_folder(payload, user_id=current_user.id)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return FolderRead.model_validate(folder)


@router.get("/", response_model=list[FolderNode])
async def list_folders(
    current_user: AuthUser = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service),
):
    """Folder tree of the current user with direct bookmark counts."""
    tree = await service.folder_tree(current_user.id)
    return [FolderNode.model_validate(node) for node in tree]


@router.put("/{folder_id}", response_model=FolderRead)
async def update_folder(
    folder_id: UUID,
    payload: FolderUpdate,
    current_user: AuthUser = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service),
):
    try:
        folder = await service.update_folder(folder_id, payload, user_id=current_user.id)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    if not folder:
        raise HTTPException(status_code=404, detail="Folder not found")
    return FolderRead.model_validate(folder)


@router.delete("/{folder_id}")
async def delete_folder(
    folder_id: UUID,
    current_user: AuthUser = Depends(get_current_user),
    service: FolderService = Depends(get_folder_service),
):
    """Delete a folder; its bookmarks and subfolders move to the root."""
    deleted = await service.delete_folder(folder_id, user_id=current_user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Folder not found")
    return {"message": "Folder removed"}
