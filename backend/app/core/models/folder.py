from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator, model_validator

from app.utils.validation import is_valid_hex_color

from .base import UserOwnedModel

DEFAULT_FOLDER_COLOR = "#808080"
DEFAULT_FOLDER_ICON = "folder"


class Folder(UserOwnedModel):
    """Folder domain model; folders nest through ``parent_id``."""

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

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return (v or "").strip()

    @field_validator("color", mode="before")
    @classmethod
    def validate_color(cls, v: str | None) -> str:
        if not v:
            return DEFAULT_FOLDER_COLOR
        if not is_valid_hex_color(v):
            raise ValueError("Color must be a hex value like #808080")
        return v

    @field_validator("icon", mode="before")
    @classmethod
    def default_icon(cls, v: str | None) -> str:
        return v or DEFAULT_FOLDER_ICON

    @model_validator(mode="after")
    def not_own_parent(self) -> Folder:
        if self.parent_id is not None and self.parent_id == self.id:
            raise ValueError("Folder cannot be its own parent")
        return self
