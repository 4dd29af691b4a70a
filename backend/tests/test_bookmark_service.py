from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from conftest import StubAnalyzer, StubFetcher

from app.api.v1.schemas.bookmark import BookmarkCreate, BookmarkUpdate, BulkActionData
from app.core.exceptions import ContentFetchError
from app.core.models.bookmark import Bookmark, BookmarkCategory
from app.core.schemas.analysis import FetchedContent
from app.core.schemas.bookmark_filter import BookmarkFilter, Page
from app.core.services.bookmark_service import (
    MISSING_KEY_MESSAGE,
    NO_TRANSCRIPT_WARNING,
    BookmarkService,
)


@pytest.fixture
def fetcher():
    return StubFetcher()


@pytest.fixture
def analyzer():
    return StubAnalyzer()


@pytest.fixture
def service(bookmark_repo, settings_repo, fetcher, analyzer):
    return BookmarkService(bookmark_repo, settings_repo, fetcher=fetcher, analyzer=analyzer)


def _bookmark(user_id, **overrides):
    data = {
        "url": f"https://example.com/{uuid4().hex}",
        "title": "Title",
        "ai_summary": "Summary",
        "user_id": user_id,
    }
    data.update(overrides)
    return Bookmark(**data)


async def test_create_bookmark_runs_full_pipeline(service, bookmark_repo, fetcher, analyzer, user_id,
                                                  configured_settings):
    await bookmark_repo.create(_bookmark(user_id, tags=["database"]))

    created = await service.create_bookmark(BookmarkCreate(url="www.example.com/vector?utm=1"), user_id)

    assert created.url == "https://example.com/vector"
    assert fetcher.urls == ["https://example.com/vector"]
    url, content, config = analyzer.calls[0]
    assert config.provider == "openai"
    assert config.api_key == "sk-test"
    assert created.title == "Vector databases explained"
    assert created.ai_summary == "Explains vector databases."
    # "Databases" folds onto the existing "database"
    assert created.tags == ["database", "vector search"]
    assert created.category is BookmarkCategory.ARTICLE
    assert created.warning is None
    assert await bookmark_repo.get(created.id) == created


async def test_create_bookmark_rejects_duplicates(service, bookmark_repo, user_id, configured_settings):
    await bookmark_repo.create(_bookmark(user_id, url="https://example.com/vector"))

    with pytest.raises(ValueError, match="already been bookmarked"):
        await service.create_bookmark(BookmarkCreate(url="https://www.example.com/vector/"), user_id)


async def test_create_bookmark_requires_api_key(service, fetcher, user_id):
    with pytest.raises(ValueError, match=MISSING_KEY_MESSAGE):
        await service.create_bookmark(BookmarkCreate(url="https://example.com/a"), user_id)
    assert fetcher.urls == []


async def test_create_bookmark_requires_key_for_selected_provider(service, settings_repo, configured_settings,
                                                                  user_id):
    settings_repo.items[user_id] = configured_settings.model_copy(update={"ai_provider": "claude"})
    with pytest.raises(ValueError, match=MISSING_KEY_MESSAGE):
        await service.create_bookmark(BookmarkCreate(url="https://example.com/a"), user_id)


async def test_create_bookmark_fetch_failure(bookmark_repo, settings_repo, analyzer, user_id, configured_settings):
    fetcher = StubFetcher(error=ContentFetchError("Request timed out. Please try again."))
    service = BookmarkService(bookmark_repo, settings_repo, fetcher=fetcher, analyzer=analyzer)

    with pytest.raises(ValueError, match="Failed to fetch content: Request timed out"):
        await service.create_bookmark(BookmarkCreate(url="https://example.com/a"), user_id)
    assert analyzer.calls == []


async def test_create_bookmark_warns_when_video_has_no_transcript(bookmark_repo, settings_repo, analyzer, user_id,
                                                                  configured_settings):
    fetcher = StubFetcher(FetchedContent(title="Talk", content="YouTube video by X. Video ID: abc",
                                         is_youtube=True, has_transcript=False))
    service = BookmarkService(bookmark_repo, settings_repo, fetcher=fetcher, analyzer=analyzer)

    created = await service.create_bookmark(BookmarkCreate(url="https://youtu.be/abc"), user_id)
    assert created.warning == NO_TRANSCRIPT_WARNING


async def test_create_bookmark_clips_overlong_page_metadata(bookmark_repo, settings_repo, analyzer, user_id,
                                                         configured_settings):
    fetcher = StubFetcher(FetchedContent(title="T" * 600, content="Body text.", description="d" * 2500))
    service = BookmarkService(bookmark_repo, settings_repo, fetcher=fetcher, analyzer=analyzer)

    created = await service.create_bookmark(BookmarkCreate(url="https://example.com/long"), user_id)

    assert created.title == "T" * 500
    assert created.description == "d" * 2000
    assert await bookmark_repo.get(created.id) == created


async def test_get_bookmark_is_scoped_to_owner(service, bookmark_repo, user_id):
    bookmark = await bookmark_repo.create(_bookmark(user_id))

    assert await service.get_bookmark(bookmark.id, user_id) == bookmark
    assert await service.get_bookmark(bookmark.id, uuid4()) is None
    assert await service.get_bookmark("not-a-uuid", user_id) is None


async def test_list_bookmarks_paginates_newest_first(service, bookmark_repo, user_id):
    now = datetime.now(UTC)
    for i in range(5):
        await bookmark_repo.create(_bookmark(user_id, title=f"b{i}", created_at=now + timedelta(minutes=i)))

    items, total = await service.list_bookmarks(user_id, BookmarkFilter(), Page(page=2, limit=2))

    assert total == 5
    assert [b.title for b in items] == ["b2", "b1"]


async def test_update_bookmark_reprocesses_tags(service, bookmark_repo, user_id):
    await bookmark_repo.create(_bookmark(user_id, tags=["machine learning"]))
    target = await bookmark_repo.create(_bookmark(user_id))

    updated = await service.update_bookmark(
        target.id,
        BookmarkUpdate(tags=["Machine-Learning", "Pythons"], is_favorite=True),
        user_id,
    )

    assert updated.tags == ["machine learning", "python"]
    assert updated.is_favorite is True


async def test_update_bookmark_can_move_to_root(service, bookmark_repo, user_id):
    target = await bookmark_repo.create(_bookmark(user_id, folder_id=uuid4()))

    updated = await service.update_bookmark(target.id, BookmarkUpdate(folder_id=None), user_id)
    assert updated.folder_id is None


async def test_update_missing_bookmark_returns_none(service, user_id):
    assert await service.update_bookmark(uuid4(), BookmarkUpdate(is_favorite=True), user_id) is None


async def test_delete_bookmark(service, bookmark_repo, user_id):
    bookmark = await bookmark_repo.create(_bookmark(user_id))

    assert await service.delete_bookmark(bookmark.id, uuid4()) is False
    assert await service.delete_bookmark(bookmark.id, user_id) is True
    assert await bookmark_repo.get(bookmark.id) is None


async def test_bulk_move_and_favorite(service, bookmark_repo, user_id):
    first = await bookmark_repo.create(_bookmark(user_id))
    second = await bookmark_repo.create(_bookmark(user_id))
    other_user = await bookmark_repo.create(_bookmark(uuid4()))
    folder_id = uuid4()
    ids = [first.id, second.id, other_user.id]

    assert await service.bulk_action("move", ids, BulkActionData(folder_id=folder_id), user_id) == 2
    assert (await bookmark_repo.get(first.id)).folder_id == folder_id
    assert (await bookmark_repo.get(other_user.id)).folder_id is None

    assert await service.bulk_action("favorite", ids, BulkActionData(is_favorite=True), user_id) == 2
    assert (await bookmark_repo.get(second.id)).is_favorite is True


async def test_bulk_tag_untag_and_category(service, bookmark_repo, user_id):
    bookmark = await bookmark_repo.create(_bookmark(user_id, tags=["python"]))

    await service.bulk_action("tag", [bookmark.id], BulkActionData(tags=["Pythons", "Web"]), user_id)
    assert (await bookmark_repo.get(bookmark.id)).tags == ["python", "web"]

    assert await service.bulk_action("untag", [bookmark.id], BulkActionData(tags=["WEB"]), user_id) == 1
    assert (await bookmark_repo.get(bookmark.id)).tags == ["python"]

    await service.bulk_action("category", [bookmark.id], BulkActionData(category="Research"), user_id)
    assert (await bookmark_repo.get(bookmark.id)).category is BookmarkCategory.RESEARCH


async def test_bulk_delete(service, bookmark_repo, user_id):
    bookmark = await bookmark_repo.create(_bookmark(user_id))
    assert await service.bulk_action("delete", [bookmark.id], BulkActionData(), user_id) == 1
    assert bookmark_repo.items == {}


@pytest.mark.parametrize(
    ("action", "data", "message"),
    [
        ("archive", BulkActionData(), "Invalid bulk action"),
        ("move", BulkActionData(), "Folder ID is required"),
        ("tag", BulkActionData(), "Tags array is required"),
        ("untag", BulkActionData(), "Tags array is required"),
        ("favorite", BulkActionData(), "Favorite status is required"),
        ("category", BulkActionData(), "Category is required"),
    ],
)
async def test_bulk_action_validation(service, user_id, action, data, message):
    with pytest.raises(ValueError, match=message):
        await service.bulk_action(action, [uuid4()], data, user_id)


async def test_bulk_action_requires_selection(service, user_id):
    with pytest.raises(ValueError, match="No bookmarks selected"):
        await service.bulk_action("delete", [], BulkActionData(), user_id)


async def test_stats_and_tag_counts(service, bookmark_repo, user_id):
    await bookmark_repo.create(_bookmark(user_id, tags=["python", "web"]))
    await bookmark_repo.create(_bookmark(user_id, tags=["python"]))
    await bookmark_repo.create(_bookmark(uuid4(), tags=["rust"]))

    stats = await service.get_stats(user_id)
    assert stats.total_bookmarks == 2
    assert stats.tags_count == 2

    tags = await service.list_tags(user_id)
    assert [(t.name, t.count) for t in tags] == [("python", 2), ("web", 1)]
