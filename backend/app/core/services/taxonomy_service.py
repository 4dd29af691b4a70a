from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from app.core.schemas.taxonomy import BookmarkStats, TagCount, TagVocabulary
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from uuid import UUID

    from app.core.repositories.bookmark_repository import BookmarkRepository


logger = get_logger(__name__)


async def count_user_tags(repo: BookmarkRepository, *, user_id: UUID) -> Counter[str]:
    """Count how many bookmarks carry each tag. Tags are lowercased."""
    counts: Counter[str] = Counter()
    for tags in await repo.list_tag_sets(user_id=user_id):
        # A tag counts once per bookmark
        counts.update({t.strip().lower() for t in tags if t and t.strip()})
    return counts


async def build_user_tag_vocabulary(repo: BookmarkRepository, *, user_id: UUID) -> TagVocabulary:
    """Aggregate the distinct tags across a user's bookmarks.

    New tags are folded onto this vocabulary before a bookmark is stored.
    """
    counts = await count_user_tags(repo, user_id=user_id)
    logger.debug("Built tag vocabulary", extra={"user_id": str(user_id), "tags": len(counts)})
    return TagVocabulary(tags=sorted(counts))


async def list_tag_counts(repo: BookmarkRepository, *, user_id: UUID) -> list[TagCount]:
    """Tags with usage counts, most used first, then alphabetical."""
    counts = await count_user_tags(repo, user_id=user_id)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TagCount(name=name, count=count) for name, count in ordered]


async def build_bookmark_stats(repo: BookmarkRepository, *, user_id: UUID) -> BookmarkStats:
    total = await repo.count(user_id=user_id)
    counts = await count_user_tags(repo, user_id=user_id)
    return BookmarkStats(total_bookmarks=total, tags_count=len(counts))
