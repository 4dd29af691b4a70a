from __future__ import annotations

from enum import Enum
from uuid import UUID, uuid4

from pydantic import Field, ValidationInfo, field_validator

from .base import UserOwnedModel

MAX_TAG_LENGTH = 50
MAX_TITLE_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 2000

_TEXT_LIMITS = {"title": MAX_TITLE_LENGTH, "description": MAX_DESCRIPTION_LENGTH}


class BookmarkCategory(str, Enum):
    """Fixed classification of bookmarked content."""

    ARTICLE = "Article"
    VIDEO = "Video"
    RESEARCH = "Research"


def clean_tag_list(tags: list[str] | None) -> list[str]:
    """Trim tags, drop empties and overlong values, keep first occurrence order."""
    cleaned: list[str] = []
    for tag in tags or []:
        if not isinstance(tag, str):
            continue
        value = tag.strip()
        if value and len(value) <= MAX_TAG_LENGTH and value not in cleaned:
            cleaned.append(value)
    return cleaned


class Bookmark(UserOwnedModel):
    """Bookmark domain model."""

    url: str = Field(..., min_length=1, max_length=2048, description="Cleaned bookmark URL")
    title: str = Field(default="", max_length=MAX_TITLE_LENGTH)
    description: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    ai_summary: str = Field(..., min_length=1, description="Summary produced by the AI provider")
    tags: list[str] = Field(default_factory=list, description="Normalized tags")
    folder_id: UUID | None = Field(default=None, description="Containing folder, None for root")
    category: BookmarkCategory = Field(default=BookmarkCategory.ARTICLE)
    is_favorite: bool = False
    warning: str | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def clip_text(cls, v: str | None, info: ValidationInfo) -> str:
        # Page metadata has no length bound; only the leading part is kept
        return (v or "").strip()[: _TEXT_LIMITS[info.field_name]].rstrip()

    @field_validator("ai_summary")
    @classmethod
    def strip_summary(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Summary is required")
        return stripped

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str]:
        return clean_tag_list(v)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": str(uuid4()),
                    "url": "https://example.com/posts/vector-databases",
                    "title": "A practical guide to vector databases",
                    "description": "How vector indexes work and when to use them.",
                    "ai_summary": "The post compares HNSW and IVF indexes and explains recall/latency trade-offs.",
                    "tags": ["vector database", "search", "machine learning"],
                    "category": "Article",
                    "user_id": str(uuid4()),
                }
            ]
        }
    }
