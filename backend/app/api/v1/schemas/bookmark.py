from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from enum import Enum
from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator

from app.core.models.base import AppBaseModel
from app.core.models.bookmark import BookmarkCategory  # noqa: TCH001
from app.utils.validation import is_valid_bookmark_url


class BookmarkCreate(AppBaseModel):
    url: str = Field(..., min_length=1, max_length=2048, description="URL to bookmark")
    folder_id: UUID | None = Field(default=None, description="Target folder, root when omitted")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        value = v.strip()
        if not is_valid_bookmark_url(value):
            raise ValueError("Please provide a valid URL")
        return value


class BookmarkUpdate(AppBaseModel):
    folder_id: UUID | None = None
    tags: list[str] | None = None
    is_favorite: bool | None = None
    category: BookmarkCategory | None = None


class BulkAction(str, Enum):
    MOVE = "move"
    TAG = "tag"
    UNTAG = "untag"
    DELETE = "delete"
    FAVORITE = "favorite"
    CATEGORY = "category"


class BulkActionData(AppBaseModel):
    folder_id: UUID | None = None
    tags: list[str] | None = None
    is_favorite: bool | None = None
    category: BookmarkCategory | None = None


class BookmarkBulkRequest(AppBaseModel):
    """Apply one action to several bookmarks of the current user."""

    action: BulkAction
    bookmark_ids: list[UUID] = Field(default_factory=list)
    data: BulkActionData = Field(default_factory=BulkActionData)


class BulkActionResult(AppBaseModel):
    message: str
    affected: int


class BookmarkRead(AppBaseModel):
    id: UUID
    url: str
    title: str
    description: str
    ai_summary: str
    tags: list[str]
    folder_id: UUID | None
    category: BookmarkCategory
    is_favorite: bool
    warning: str | None
    user_id: UUID
    created_at: datetime
    updated_at: datetime | None


class BookmarkPage(AppBaseModel):
    data: list[BookmarkRead]
    total: int
    page: int
    limit: int
    has_more: bool
