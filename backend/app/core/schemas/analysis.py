from __future__ import annotations

from pydantic import Field

from app.core.models.base import AppBaseModel
from app.core.models.bookmark import BookmarkCategory
from app.core.models.user_settings import AIProvider  # noqa: TCH001


class AnalysisResult(AppBaseModel):
    """Summary, tags and category produced for one piece of content.

    Transient: the bookmark service decomposes it into bookmark fields.
    """

    summary: str
    tags: list[str] = Field(default_factory=list)
    category: BookmarkCategory = BookmarkCategory.ARTICLE


class ProviderConfig(AppBaseModel):
    """Which provider to use for an analysis and the credential for it.

    ``provider`` stays a plain string when it does not name a known provider so
    the dispatcher can reject it as a configuration error instead of failing
    validation at the call site.
    """

    provider: AIProvider | str | None = None
    api_key: str | None = Field(default=None, repr=False)


class FetchedContent(AppBaseModel):
    """Text extracted from a bookmarked page."""

    title: str = ""
    content: str = ""
    description: str = ""
    is_youtube: bool = False
    has_transcript: bool = False
