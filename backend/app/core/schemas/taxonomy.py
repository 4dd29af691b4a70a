from __future__ import annotations

from pydantic import Field

from app.core.models.base import AppBaseModel


class TagVocabulary(AppBaseModel):
    """Distinct tags already used across a user's bookmarks.

    Read before new tags are processed so near-duplicates fold onto the
    spelling the user already has.
    """

    tags: list[str] = Field(default_factory=list)


class TagCount(AppBaseModel):
    name: str
    count: int


class BookmarkStats(AppBaseModel):
    total_bookmarks: int
    tags_count: int
