from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends

from app.core.models.bookmark import BookmarkCategory
from app.core.schemas.taxonomy import TagVocabulary
from app.core.services.taxonomy_service import build_user_tag_vocabulary
from app.dependencies import get_bookmark_repository, get_current_user

if TYPE_CHECKING:
    from app.core.repositories.bookmark_repository import BookmarkRepository
    from app.core.schemas.auth import AuthUser


router = APIRouter()


@router.get("/taxonomy", response_model=TagVocabulary)
async def get_user_taxonomy(
    current_user: AuthUser = Depends(get_current_user),
    repo: BookmarkRepository = Depends(get_bookmark_repository),
) -> TagVocabulary:
    """Return the distinct tags across the current user's bookmarks.

    This is the vocabulary new tags are folded onto when a bookmark is saved.
    """
    return await build_user_tag_vocabulary(repo, user_id=current_user.id)


@router.get("/categories", response_model=list[str])
async def list_categories() -> list[str]:
    """Return all bookmark categories for client-side filtering."""
    return [c.value for c in BookmarkCategory]
