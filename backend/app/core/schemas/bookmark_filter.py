from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator

from app.core.models.base import AppBaseModel
from app.core.models.bookmark import BookmarkCategory  # noqa: TCH001


class BookmarkFilter(AppBaseModel):
    """Filters shared by the bookmark list and search endpoints.

    ``filter_by_folder`` distinguishes "no folder filter" from "root folder only"
    (``folder_id=None``).
    """

    filter_by_folder: bool = False
    folder_id: UUID | None = None
    favorite_only: bool = False
    category: BookmarkCategory | None = None
    query: str | None = None
    tags: list[str] | None = None

    @field_validator("query")
    @classmethod
    def blank_query_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return None
        cleaned = [t.strip() for t in v if t and t.strip()]
        return cleaned or None


class Page(AppBaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=24, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
