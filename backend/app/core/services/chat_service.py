from __future__ import annotations

from typing import TYPE_CHECKING

from app.config import settings
from app.core.exceptions import ConfigurationError
from app.core.schemas.analysis import ProviderConfig
from app.core.services.analysis_service import build_provider
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from app.core.models.bookmark import Bookmark
    from app.core.providers.provider import LLMProvider
    from app.core.repositories.bookmark_repository import BookmarkRepository
    from app.core.repositories.user_settings_repository import UserSettingsRepository


logger = get_logger(__name__)

CHAT_SYSTEM_PROMPT = """You are a helpful assistant that provides brief information about bookmarks. When responding:

1. Keep responses short and focused
2. Format bookmark links using markdown: [title](url)
3. Include relevant tags as hashtags after the link
4. Limit responses to 1-2 lines plus the bookmark links

Available bookmarks:
{bookmarks}"""


def format_bookmark_line(bookmark: Bookmark) -> str:
    title = bookmark.title or bookmark.url
    line = f"[{title}]({bookmark.url})"
    if bookmark.tags:
        line += " " + " ".join(f"#{t}" for t in bookmark.tags)
    return line


def build_chat_prompt(bookmarks: Sequence[Bookmark]) -> str:
    lines = "\n".join(format_bookmark_line(b) for b in bookmarks)
    return CHAT_SYSTEM_PROMPT.format(bookmarks=lines or "(no bookmarks yet)")


class ChatService:
    """Answers questions about the user's most recent bookmarks."""

    def __init__(
        self,
        bookmark_repo: BookmarkRepository,
        settings_repo: UserSettingsRepository,
        *,
        provider_factory: Callable[[ProviderConfig], LLMProvider] = build_provider,
        recent_limit: int | None = None,
    ) -> None:
        self._bookmarks = bookmark_repo
        self._settings_repo = settings_repo
        self._provider_factory = provider_factory
        self._recent_limit = recent_limit or settings.chat_recent_bookmarks

    async def reply(self, message: str, user_id: UUID) -> str:
        """Return the assistant's answer.

        Raises ValueError when no usable provider is configured; provider
        failures propagate as ``ProviderCallError``.
        """
        user_settings = await self._settings_repo.get(user_id)
        config = ProviderConfig(
            provider=user_settings.ai_provider if user_settings else None,
            api_key=user_settings.api_key_for() if user_settings else None,
        )
        try:
            provider = self._provider_factory(config)
        except ConfigurationError as err:
            raise ValueError(str(err)) from err

        recent = await self._bookmarks.recent(user_id=user_id, limit=self._recent_limit)
        logger.info(
            "Sending chat request to %s", provider.name,
            extra={"user_id": str(user_id), "bookmarks": len(recent), "message_length": len(message)},
        )
        return await provider.chat(system=build_chat_prompt(recent), message=message)
