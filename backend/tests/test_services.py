from uuid import uuid4

import pytest
from conftest import ScriptedProvider

from app.api.v1.schemas.folder import FolderCreate, FolderUpdate
from app.api.v1.schemas.settings import AISettingsUpdate
from app.core.exceptions import ProviderCallError
from app.core.models.bookmark import Bookmark
from app.core.models.user_settings import AIProvider, UserAISettings
from app.core.services.chat_service import ChatService, build_chat_prompt
from app.core.services.folder_service import FolderService
from app.core.services.settings_service import SettingsService
from app.core.services.taxonomy_service import build_user_tag_vocabulary


@pytest.fixture
def folders(folder_repo, bookmark_repo):
    return FolderService(folder_repo, bookmark_repo)


async def test_folder_tree_nests_subfolders_with_counts(folders, bookmark_repo, user_id):
    parent = await folders.create_folder(FolderCreate(name="Reading"), user_id)
    child = await folders.create_folder(FolderCreate(name="Papers", parent_id=parent.id), user_id)
    await bookmark_repo.create(Bookmark(url="https://a.example", ai_summary="s", folder_id=child.id, user_id=user_id))
    await bookmark_repo.create(Bookmark(url="https://b.example", ai_summary="s", folder_id=child.id, user_id=user_id))

    tree = await folders.folder_tree(user_id)

    assert [node["name"] for node in tree] == ["Reading"]
    assert tree[0]["bookmark_count"] == 0
    assert [(n["name"], n["bookmark_count"]) for n in tree[0]["subfolders"]] == [("Papers", 2)]


async def test_create_folder_rejects_unknown_parent(folders, user_id):
    with pytest.raises(ValueError, match="Parent folder not found"):
        await folders.create_folder(FolderCreate(name="Orphan", parent_id=uuid4()), user_id)


async def test_update_folder_rejects_self_parent(folders, user_id):
    folder = await folders.create_folder(FolderCreate(name="Loop"), user_id)

    with pytest.raises(ValueError, match="own parent"):
        await folders.update_folder(folder.id, FolderUpdate(parent_id=folder.id), user_id)


async def test_update_folder_partial(folders, user_id):
    folder = await folders.create_folder(FolderCreate(name="Old", color="#112233"), user_id)

    updated = await folders.update_folder(folder.id, FolderUpdate(name="New"), user_id)

    assert updated.name == "New"
    assert updated.color == "#112233"
    assert await folders.update_folder(uuid4(), FolderUpdate(name="x"), user_id) is None


async def test_delete_folder_moves_contents_to_root(folders, folder_repo, bookmark_repo, user_id):
    parent = await folders.create_folder(FolderCreate(name="Parent"), user_id)
    child = await folders.create_folder(FolderCreate(name="Child", parent_id=parent.id), user_id)
    bookmark = await bookmark_repo.create(
        Bookmark(url="https://a.example", ai_summary="s", folder_id=parent.id, user_id=user_id)
    )

    assert await folders.delete_folder(parent.id, user_id) is True

    assert (await bookmark_repo.get(bookmark.id)).folder_id is None
    assert (await folder_repo.get(child.id)).parent_id is None
    assert await folder_repo.get(parent.id) is None
    assert await folders.delete_folder(parent.id, user_id) is False


async def test_settings_default_when_never_saved(settings_repo, user_id):
    current = await SettingsService(settings_repo).get_settings(user_id)

    assert current.ai_provider is AIProvider.OPENAI
    assert current.has_any_key is False


async def test_settings_update_requires_key_for_selected_provider(settings_repo, user_id):
    service = SettingsService(settings_repo)

    with pytest.raises(ValueError, match="Claude API key is required"):
        await service.update_settings(AISettingsUpdate(ai_provider="claude"), user_id)

    saved = await service.update_settings(AISettingsUpdate(ai_provider="claude", anthropic_api_key=" sk-ant "), user_id)
    assert saved.ai_provider is AIProvider.CLAUDE
    assert saved.anthropic_api_key == "sk-ant"
    assert settings_repo.items[user_id] == saved


async def test_settings_tour_flag_does_not_need_a_key(settings_repo, user_id):
    saved = await SettingsService(settings_repo).update_settings(AISettingsUpdate(has_completed_tour=True), user_id)
    assert saved.has_completed_tour is True


async def test_settings_clearing_selected_key_is_rejected(settings_repo, configured_settings, user_id):
    with pytest.raises(ValueError, match="OpenAI API key is required"):
        await SettingsService(settings_repo).update_settings(AISettingsUpdate(openai_api_key=""), user_id)


async def test_taxonomy_vocabulary_is_sorted_and_distinct(bookmark_repo, user_id):
    await bookmark_repo.create(Bookmark(url="https://a.example", ai_summary="s", tags=["Web", "python"],
                                        user_id=user_id))
    await bookmark_repo.create(Bookmark(url="https://b.example", ai_summary="s", tags=["python"], user_id=user_id))

    vocabulary = await build_user_tag_vocabulary(bookmark_repo, user_id=user_id)
    assert vocabulary.tags == ["python", "web"]


def test_chat_prompt_lists_bookmarks_with_hashtags(user_id):
    prompt = build_chat_prompt([
        Bookmark(url="https://a.example", title="Alpha", ai_summary="s", tags=["python", "web"], user_id=user_id),
        Bookmark(url="https://b.example", ai_summary="s", user_id=user_id),
    ])

    assert "[Alpha](https://a.example) #python #web" in prompt
    assert "[https://b.example](https://b.example)" in prompt


async def test_chat_uses_recent_bookmarks_and_configured_provider(bookmark_repo, settings_repo, configured_settings,
                                                                   user_id):
    await bookmark_repo.create(Bookmark(url="https://a.example", title="Alpha", ai_summary="s", user_id=user_id))
    provider = ScriptedProvider(chat="Try [Alpha](https://a.example)")
    configs = []

    def factory(config):
        configs.append(config)
        return provider

    service = ChatService(bookmark_repo, settings_repo, provider_factory=factory)
    reply = await service.reply("what did I save?", user_id)

    assert reply == "Try [Alpha](https://a.example)"
    assert provider.calls == ["chat"]
    assert configs[0].api_key == "sk-test"


async def test_chat_without_settings_is_a_value_error(bookmark_repo, settings_repo, user_id):
    with pytest.raises(ValueError, match="AI provider not specified"):
        await ChatService(bookmark_repo, settings_repo).reply("hi", user_id)


async def test_chat_propagates_provider_failures(bookmark_repo, settings_repo, user_id):
    settings_repo.items[user_id] = UserAISettings(user_id=user_id, openai_api_key="sk")

    class FailingProvider(ScriptedProvider):
        async def complete(self, **kwargs):
            raise ProviderCallError("boom", provider="openai")

    service = ChatService(bookmark_repo, settings_repo, provider_factory=lambda config: FailingProvider())
    with pytest.raises(ProviderCallError):
        await service.reply("hi", user_id)
