from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.api.v1.schemas.bookmark import (
    BookmarkBulkRequest,
    BookmarkCreate,
    BookmarkPage,
    BookmarkRead,
    BookmarkUpdate,
    BulkActionResult,
)
from app.core.models.bookmark import BookmarkCategory  # noqa: TCH001
from app.core.schemas.bookmark_filter import BookmarkFilter, Page
from app.core.schemas.taxonomy import BookmarkStats, TagCount
from app.dependencies import get_bookmark_service, get_current_user
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from app.core.schemas.auth import AuthUser
    from app.core.services.bookmark_service import BookmarkService

logger = get_logger(__name__)

router = APIRouter()


def _build_filter(
    request: Request,
    folder_id: str | None,
    favorite: bool,
    category: BookmarkCategory | None,
    query: str | None = None,
    tags: str | None = None,
) -> BookmarkFilter:
    # An explicit but empty folder_id selects bookmarks at the root
    return BookmarkFilter(
        filter_by_folder="folder_id" in request.query_params,
        folder_id=_parse_folder_id(folder_id),
        favorite_only=favorite,
        category=category,
        query=query,
        tags=tags.split(",") if tags else None,
    )


async def _page_response(
    service: BookmarkService, user_id: UUID, filters: BookmarkFilter, page: Page
) -> BookmarkPage:
    try:
        items, total = await service.list_bookmarks(user_id, filters, page)
    except Exception as err:
        logger.error("Failed to list bookmarks", extra={"error": str(err), "user_id": str(user_id)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from err
    return BookmarkPage(
        data=[BookmarkRead.model_validate(b) for b in items],
        total=total,
        page=page.page,
        limit=page.limit,
        has_more=total > page.offset + len(items),
    )


def _parse_folder_id(value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid folder id") from err


@router.post("/", response_model=BookmarkRead, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    payload: BookmarkCreate,
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Fetch, analyze and store a URL for the current user."""
    try:
        bookmark = await service.create_bookmark(payload, user_id=current_user.id)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err
    except Exception as err:
        logger.error("Bookmark creation failed", extra={"error": str(err), "user_id": str(current_user.id)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save bookmark",
        ) from err
    return BookmarkRead.model_validate(bookmark)


@router.get("/", response_model=BookmarkPage)
async def list_bookmarks(
    request: Request,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=24, ge=1, le=100),
    folder_id: str | None = Query(default=None, description="Folder id; empty selects the root"),
    favorite: bool = False,
    category: BookmarkCategory | None = None,
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """List bookmarks newest first with optional folder, favorite and category filters."""
    filters = _build_filter(request, folder_id, favorite, category)
    return await _page_response(service, current_user.id, filters, Page(page=page, limit=limit))


@router.get("/search", response_model=BookmarkPage)
async def search_bookmarks(
    request: Request,
    query: str | None = None,
    tags: str | None = Query(default=None, description="Comma-separated tags, any match"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=24, ge=1, le=100),
    folder_id: str | None = Query(default=None, description="Folder id; empty selects the root"),
    favorite: bool = False,
    category: BookmarkCategory | None = None,
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Text search over title, description and summary combined with tag filters."""
    filters = _build_filter(request, folder_id, favorite, category, query=query, tags=tags)
    return await _page_response(service, current_user.id, filters, Page(page=page, limit=limit))


@router.post("/bulk", response_model=BulkActionResult)
async def bulk_action(
    payload: BookmarkBulkRequest,
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    try:
        affected = await service.bulk_action(
            payload.action,
            payload.bookmark_ids,
            payload.data,
            user_id=current_user.id,
        )
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err
    except Exception as err:
        logger.error("Bulk operation failed", extra={"error": str(err), "action": payload.action.value})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to perform bulk operation",
        ) from err
    return BulkActionResult(message="Bulk operation completed successfully", affected=affected)


@router.get("/stats", response_model=BookmarkStats)
async def get_stats(
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    return await service.get_stats(current_user.id)


@router.get("/tags", response_model=list[TagCount])
async def list_tags(
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """All tags of the current user with usage counts, most used first."""
    return await service.list_tags(current_user.id)


@router.get("/{bookmark_id}", response_model=BookmarkRead)
async def get_bookmark(
    bookmark_id: UUID,
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    bookmark = await service.get_bookmark(bookmark_id, user_id=current_user.id)
    if not bookmark:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkRead.model_validate(bookmark)


@router.put("/{bookmark_id}", response_model=BookmarkRead)
async def update_bookmark(
    bookmark_id: UUID,
    payload: BookmarkUpdate,
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    """Move, retag, favorite or recategorize a bookmark."""
    bookmark = await service.update_bookmark(bookmark_id, payload, user_id=current_user.id)
    if not bookmark:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkRead.model_validate(bookmark)


@router.delete("/{bookmark_id}")
async def delete_bookmark(
    bookmark_id: UUID,
    current_user: AuthUser = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
):
    deleted = await service.delete_bookmark(bookmark_id, user_id=current_user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return {"message": "Bookmark removed"}
