from __future__ import annotations

from uuid import UUID  # noqa: TCH003

from app.core.models.base import AppBaseModel


class AuthUser(AppBaseModel):
    """Authenticated user resolved from a Supabase JWT.

    ``id`` is the owner key for bookmarks, folders and AI settings.
    """

    id: UUID
    email: str
    role: str | None = None
