from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from app.config import settings
from app.core.exceptions import ContentFetchError
from app.core.models.bookmark import Bookmark, BookmarkCategory
from app.core.schemas.analysis import ProviderConfig
from app.core.services.tag_normalizer import process_tags
from app.core.services.taxonomy_service import (
    build_bookmark_stats,
    build_user_tag_vocabulary,
    list_tag_counts,
)
from app.utils.logging import get_logger
from app.utils.url_cleaner import clean_url

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.core.repositories.bookmark_repository import BookmarkRepository
    from app.core.repositories.user_settings_repository import UserSettingsRepository
    from app.core.schemas.bookmark_filter import BookmarkFilter, Page
    from app.core.schemas.taxonomy import BookmarkStats, TagCount
    from app.core.services.analysis_service import AnalysisService
    from app.core.services.content_fetcher import ContentFetcher


logger = get_logger(__name__)

MISSING_KEY_MESSAGE = "API key is required. Please add it in your account settings."
NO_TRANSCRIPT_WARNING = "No transcript was available for this video; the summary is based on its title only."

BULK_ACTIONS = frozenset({"move", "tag", "untag", "delete", "favorite", "category"})


class BookmarkService:
    """Bookmark lifecycle for a single user (RLS friendly).

    Creation runs the whole pipeline: clean the URL, fetch the page, analyze it
    with the user's AI provider and fold the proposed tags onto the tags the
    user already has.
    """

    def __init__(
        self,
        repo: BookmarkRepository,
        settings_repo: UserSettingsRepository,
        *,
        fetcher: ContentFetcher,
        analyzer: AnalysisService,
        similarity_threshold: float | None = None,
    ) -> None:
        self._repo = repo
        self._settings_repo = settings_repo
        self._fetcher = fetcher
        self._analyzer = analyzer
        self._threshold = (
            similarity_threshold if similarity_threshold is not None else settings.tag_similarity_threshold
        )

    async def _existing_tags(self, user_id: UUID) -> list[str]:
        vocabulary = await build_user_tag_vocabulary(self._repo, user_id=user_id)
        return vocabulary.tags

    async def _process_tags(self, tags: Sequence[str], user_id: UUID) -> list[str]:
        existing = await self._existing_tags(user_id)
        return process_tags(tags, existing, threshold=self._threshold)

    async def _provider_config(self, user_id: UUID) -> ProviderConfig:
        user_settings = await self._settings_repo.get(user_id)
        if user_settings is None or not user_settings.api_key_for():
            raise ValueError(MISSING_KEY_MESSAGE)
        return ProviderConfig(
            provider=user_settings.ai_provider,
            api_key=user_settings.api_key_for(),
        )

    async def create_bookmark(self, create_dto, user_id: UUID) -> Bookmark:
        """Fetch, analyze and store a new bookmark.

        Raises ValueError for duplicates, a missing API key or an unreachable page.
        """
        url = clean_url(create_dto.url)

        if await self._repo.get_by_url(user_id=user_id, url=url):
            raise ValueError("This URL has already been bookmarked")

        config = await self._provider_config(user_id)

        try:
            fetched = await self._fetcher.fetch(url)
        except ContentFetchError as err:
            logger.warning("Content fetch failed", extra={"url": url, "status_code": err.status_code})
            raise ValueError(f"Failed to fetch content: {err}") from err
        if not fetched.content:
            raise ValueError("Failed to fetch content: No content could be fetched from URL")

        analysis = await self._analyzer.analyze(url, fetched.content, config)
        tags = await self._process_tags(analysis.tags, user_id)

        warning = None
        if fetched.is_youtube and not fetched.has_transcript:
            warning = NO_TRANSCRIPT_WARNING

        bookmark = Bookmark(
            url=url,
            title=fetched.title,
            description=fetched.description,
            ai_summary=analysis.summary,
            tags=tags,
            category=analysis.category,
            folder_id=getattr(create_dto, "folder_id", None),
            warning=warning,
            user_id=user_id,
        )
        created = await self._repo.create(bookmark)
        logger.info(
            "Bookmark created",
            extra={"bookmark_id": str(created.id), "user_id": str(user_id), "category": created.category.value},
        )
        return created

    async def get_bookmark(self, bookmark_id: str | UUID, user_id: UUID) -> Bookmark | None:
        """Return bookmark if it exists and belongs to the user; otherwise None."""
        try:
            bookmark_uuid = UUID(str(bookmark_id))
        except ValueError:
            return None
        bookmark = await self._repo.get(bookmark_uuid)
        if bookmark and bookmark.user_id == user_id:
            return bookmark
        return None

    async def list_bookmarks(
        self, user_id: UUID, filters: BookmarkFilter, page: Page
    ) -> tuple[Sequence[Bookmark], int]:
        """Return one page of bookmarks (newest first) and the total match count."""
        return await self._repo.query(
            user_id=user_id,
            filters=filters,
            offset=page.offset,
            limit=page.limit,
        )

    async def update_bookmark(self, bookmark_id: str | UUID, update_dto, user_id: UUID) -> Bookmark | None:
        existing = await self.get_bookmark(bookmark_id, user_id)
        if not existing:
            return None

        raw_changes = update_dto.model_dump(exclude_unset=True)
        allowed_fields = {"folder_id", "tags", "is_favorite", "category"}
        changes: dict[str, Any] = {k: v for k, v in raw_changes.items() if k in allowed_fields}

        if "tags" in changes:
            changes["tags"] = await self._process_tags(changes["tags"] or [], user_id)
        if changes.get("is_favorite", False) is None:
            changes.pop("is_favorite")
        if "category" in changes and changes["category"] is None:
            changes.pop("category")

        return await self._repo.update_fields(existing.id, changes)

    async def delete_bookmark(self, bookmark_id: str | UUID, user_id: UUID) -> bool:
        bookmark = await self.get_bookmark(bookmark_id, user_id)
        if not bookmark:
            return False
        return await self._repo.delete(bookmark.id)

    async def bulk_action(self, action: str, bookmark_ids: Sequence[UUID], data, user_id: UUID) -> int:
        """Apply ``action`` to the user's bookmarks among ``bookmark_ids``.

        Returns the number of bookmarks affected; raises ValueError when the
        action is unknown or its payload is incomplete.
        """
        action = getattr(action, "value", action)
        if action not in BULK_ACTIONS:
            raise ValueError("Invalid bulk action")
        if not bookmark_ids:
            raise ValueError("No bookmarks selected")

        provided = data.model_fields_set if data is not None else set()

        if action == "move":
            if "folder_id" not in provided:
                raise ValueError("Folder ID is required")
            affected = await self._repo.update_many(
                user_id=user_id, ids=bookmark_ids, changes={"folder_id": data.folder_id}
            )
        elif action == "tag":
            if data.tags is None:
                raise ValueError("Tags array is required")
            tags = await self._process_tags(data.tags, user_id)
            affected = await self._repo.update_many(user_id=user_id, ids=bookmark_ids, changes={"tags": tags})
        elif action == "untag":
            if data.tags is None:
                raise ValueError("Tags array is required")
            affected = await self._remove_tags(bookmark_ids, data.tags, user_id)
        elif action == "delete":
            affected = await self._repo.delete_many(user_id=user_id, ids=bookmark_ids)
        elif action == "favorite":
            if data.is_favorite is None:
                raise ValueError("Favorite status is required")
            affected = await self._repo.update_many(
                user_id=user_id, ids=bookmark_ids, changes={"is_favorite": data.is_favorite}
            )
        else:
            if data.category is None:
                raise ValueError("Category is required")
            category = BookmarkCategory(data.category)
            affected = await self._repo.update_many(
                user_id=user_id, ids=bookmark_ids, changes={"category": category}
            )

        logger.info(
            "Bulk %s applied", action, extra={"user_id": str(user_id), "requested": len(bookmark_ids), "affected": affected}
        )
        return affected

    async def _remove_tags(self, bookmark_ids: Sequence[UUID], tags: Sequence[str], user_id: UUID) -> int:
        removed = {t.strip().lower() for t in tags if t and t.strip()}
        affected = 0
        for bookmark in await self._repo.list_by_ids(user_id=user_id, ids=bookmark_ids):
            remaining = [t for t in bookmark.tags if t.lower() not in removed]
            if remaining != bookmark.tags:
                await self._repo.update_fields(bookmark.id, {"tags": remaining})
                affected += 1
        return affected

    async def get_stats(self, user_id: UUID) -> BookmarkStats:
        return await build_bookmark_stats(self._repo, user_id=user_id)

    async def list_tags(self, user_id: UUID) -> list[TagCount]:
        return await list_tag_counts(self._repo, user_id=user_id)
