from __future__ import annotations

from pydantic import Field, field_validator

from app.core.models.base import AppBaseModel


class ChatRequest(AppBaseModel):
    """Question about the user's recent bookmarks."""

    message: str = Field(..., min_length=1, max_length=4000, description="User's message to the assistant")

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Message is required")
        return stripped


class ChatResponse(AppBaseModel):
    reply: str
