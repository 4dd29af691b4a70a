from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator

from app.core.models.base import AppBaseModel
from app.core.models.folder import DEFAULT_FOLDER_COLOR, DEFAULT_FOLDER_ICON
from app.utils.validation import is_valid_hex_color


def _check_color(v: str | None) -> str | None:
    if v is not None and not is_valid_hex_color(v):
        raise ValueError("Color must be a hex value like #808080")
    return v


class FolderCreate(AppBaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    parent_id: UUID | None = None
    color: str = Field(default=DEFAULT_FOLDER_COLOR)
    icon: str = Field(default=DEFAULT_FOLDER_ICON, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Folder name is required")
        return stripped

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        return _check_color(v) or DEFAULT_FOLDER_COLOR


class FolderUpdate(AppBaseModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    parent_id: UUID | None = None
    color: str | None = None
    icon: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        stripped = v.strip()
        if not stripped:
            raise ValueError("Folder name cannot be empty")
        return stripped

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        return _check_color(v)


class FolderRead(AppBaseModel):
    id: UUID
    name: str
    description: str
    parent_id: UUID | None
    color: str
    icon: str
    user_id: UUID
    created_at: datetime
    updated_at: datetime | None


class FolderNode(FolderRead):
    """Folder with its direct bookmark count and nested subfolders."""

    bookmark_count: int = 0
    subfolders: list[FolderNode] = Field(default_factory=list)
