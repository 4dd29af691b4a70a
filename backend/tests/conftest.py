from __future__ import annotations

import os

# Settings are read at import time, so these must exist before `app` is imported
os.environ.setdefault("APP_SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("APP_SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("APP_SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

from collections import Counter  # noqa: E402
from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402

from app.core.exceptions import ContentFetchError  # noqa: E402
from app.core.models.user_settings import AIProvider, UserAISettings  # noqa: E402
from app.core.providers.provider import LLMProvider  # noqa: E402
from app.core.repositories.bookmark_repository import BookmarkRepository  # noqa: E402
from app.core.repositories.folder_repository import FolderRepository  # noqa: E402
from app.core.repositories.user_settings_repository import UserSettingsRepository  # noqa: E402
from app.core.schemas.analysis import AnalysisResult, FetchedContent  # noqa: E402


class InMemoryBookmarkRepository(BookmarkRepository):
    def __init__(self) -> None:
        self.items: dict[UUID, object] = {}

    async def create(self, bookmark):
        self.items[bookmark.id] = bookmark
        return bookmark

    async def get(self, bookmark_id):
        return self.items.get(bookmark_id)

    async def get_by_url(self, *, user_id, url):
        for b in self.items.values():
            if b.user_id == user_id and b.url == url:
                return b
        return None

    def _owned(self, user_id):
        owned = [b for b in self.items.values() if b.user_id == user_id]
        return sorted(owned, key=lambda b: b.created_at, reverse=True)

    async def query(self, *, user_id, filters, offset, limit):
        matches = []
        for b in self._owned(user_id):
            if filters.filter_by_folder and b.folder_id != filters.folder_id:
                continue
            if filters.favorite_only and not b.is_favorite:
                continue
            if filters.category is not None and b.category != filters.category:
                continue
            if filters.tags and not set(filters.tags) & set(b.tags):
                continue
            if filters.query:
                haystack = " ".join([b.title, b.description, b.ai_summary]).lower()
                if filters.query.lower() not in haystack:
                    continue
            matches.append(b)
        return matches[offset:offset + limit], len(matches)

    async def recent(self, *, user_id, limit):
        return self._owned(user_id)[:limit]

    async def list_by_ids(self, *, user_id, ids):
        return [b for b in self._owned(user_id) if b.id in set(ids)]

    async def list_tag_sets(self, *, user_id):
        return [list(b.tags) for b in self._owned(user_id)]

    async def count(self, *, user_id):
        return len(self._owned(user_id))

    async def folder_counts(self, *, user_id):
        return dict(Counter(b.folder_id for b in self._owned(user_id)))

    async def update_fields(self, bookmark_id, changes):
        existing = self.items.get(bookmark_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=changes)
        self.items[bookmark_id] = updated
        return updated

    async def update_many(self, *, user_id, ids, changes):
        affected = 0
        for b in await self.list_by_ids(user_id=user_id, ids=ids):
            await self.update_fields(b.id, changes)
            affected += 1
        return affected

    async def move_folder_to_root(self, *, user_id, folder_id):
        moved = 0
        for b in self._owned(user_id):
            if b.folder_id == folder_id:
                await self.update_fields(b.id, {"folder_id": None})
                moved += 1
        return moved

    async def delete(self, bookmark_id):
        return self.items.pop(bookmark_id, None) is not None

    async def delete_many(self, *, user_id, ids):
        doomed = [b.id for b in await self.list_by_ids(user_id=user_id, ids=ids)]
        for bookmark_id in doomed:
            del self.items[bookmark_id]
        return len(doomed)


class InMemoryFolderRepository(FolderRepository):
    def __init__(self) -> None:
        self.items: dict[UUID, object] = {}

    async def create(self, folder):
        self.items[folder.id] = folder
        return folder

    async def get(self, folder_id):
        return self.items.get(folder_id)

    async def list(self, *, user_id):
        owned = [f for f in self.items.values() if f.user_id == user_id]
        return sorted(owned, key=lambda f: f.name)

    async def update_fields(self, folder_id, changes):
        existing = self.items.get(folder_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=changes)
        self.items[folder_id] = updated
        return updated

    async def move_children_to_root(self, *, user_id, folder_id):
        moved = 0
        for f in list(self.items.values()):
            if f.user_id == user_id and f.parent_id == folder_id:
                self.items[f.id] = f.model_copy(update={"parent_id": None})
                moved += 1
        return moved

    async def delete(self, folder_id):
        return self.items.pop(folder_id, None) is not None


class InMemoryUserSettingsRepository(UserSettingsRepository):
    def __init__(self) -> None:
        self.items: dict[UUID, UserAISettings] = {}

    async def get(self, user_id):
        return self.items.get(user_id)

    async def upsert(self, user_settings):
        self.items[user_settings.user_id] = user_settings
        return user_settings


class ScriptedProvider(LLMProvider):
    """Provider double that answers by system prompt and records every call."""

    name = "scripted"

    def __init__(self, *, summary="A short summary.", tags='["python", "testing"]', category="Article",
                 chat="Here you go.", fail=()):
        self.replies = {"summary": summary, "tags": tags, "category": category, "chat": chat}
        self.fail = set(fail)
        self.calls: list[str] = []

    async def complete(self, *, system, prompt, max_tokens, temperature):
        if max_tokens == 150:
            kind = "summary"
        elif max_tokens == 100:
            kind = "tags"
        elif max_tokens == 10:
            kind = "category"
        else:
            kind = "chat"
        self.calls.append(kind)
        if kind in self.fail:
            raise RuntimeError(f"{kind} exploded")
        return self.replies[kind]


class StubFetcher:
    def __init__(self, content: FetchedContent | None = None, error: ContentFetchError | None = None):
        self.content = content or FetchedContent(
            title="Vector databases explained",
            content="A long article about vector databases and similarity search.",
            description="How vector indexes work.",
        )
        self.error = error
        self.urls: list[str] = []

    async def fetch(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.content


class StubAnalyzer:
    def __init__(self, result: AnalysisResult | None = None):
        self.result = result or AnalysisResult(
            summary="Explains vector databases.",
            tags=["Databases", "vector search"],
            category="Article",
        )
        self.calls: list[tuple] = []

    async def analyze(self, url, content, config):
        self.calls.append((url, content, config))
        return self.result


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def bookmark_repo() -> InMemoryBookmarkRepository:
    return InMemoryBookmarkRepository()


@pytest.fixture
def folder_repo() -> InMemoryFolderRepository:
    return InMemoryFolderRepository()


@pytest.fixture
def settings_repo() -> InMemoryUserSettingsRepository:
    return InMemoryUserSettingsRepository()


@pytest.fixture
def configured_settings(settings_repo, user_id) -> UserAISettings:
    stored = UserAISettings(user_id=user_id, ai_provider=AIProvider.OPENAI, openai_api_key="sk-test")
    settings_repo.items[user_id] = stored
    return stored
