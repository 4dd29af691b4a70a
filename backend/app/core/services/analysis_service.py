from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from pydantic import TypeAdapter, ValidationError

from app.core.exceptions import ConfigurationError, TagParseError
from app.core.models.bookmark import MAX_TAG_LENGTH, BookmarkCategory
from app.core.models.user_settings import AIProvider
from app.core.providers.implementations.anthropic_provider import AnthropicProvider
from app.core.providers.implementations.openai_provider import OpenAIProvider
from app.core.schemas.analysis import AnalysisResult, ProviderConfig
from app.utils.ai_clients import get_anthropic_client, get_openai_client
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.core.providers.provider import LLMProvider

logger = get_logger(__name__)

SUMMARY_FAILED = "Summary generation failed. Please try again later."
NO_SUMMARY = "No summary available."

GENERIC_TAGS = frozenset({
    "other",
    "miscellaneous",
    "general",
    "misc",
    "various",
    "article",
    "content",
    "video",
    "youtube",
})

VIDEO_HOSTS = ("youtube.com", "youtu.be", "vimeo.com", "dailymotion.com", "twitch.tv")
RESEARCH_HOSTS = (
    "arxiv.org",
    "doi.org",
    "biorxiv.org",
    "medrxiv.org",
    "ssrn.com",
    "semanticscholar.org",
    "researchgate.net",
    "pubmed.ncbi.nlm.nih.gov",
)
# Matched against whole words of the URL path
RESEARCH_PATH_WORDS = frozenset({"research", "paper", "papers"})
_PATH_WORD_RE = re.compile(r"[a-z0-9]+")

_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)
_TAG_LIST = TypeAdapter(list[str])


def _host_matches(host: str, domains: tuple[str, ...]) -> bool:
    return any(host == d or host.endswith("." + d) for d in domains)


def category_from_url(url: str) -> BookmarkCategory | None:
    """Classify well-known video and research sources without asking a provider."""
    candidate = url if "://" in url else f"https://{url}"
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return None
    host = (parts.hostname or "").lower()

    if _host_matches(host, VIDEO_HOSTS):
        return BookmarkCategory.VIDEO

    if _host_matches(host, RESEARCH_HOSTS):
        return BookmarkCategory.RESEARCH
    path_words = set(_PATH_WORD_RE.findall(parts.path.lower()))
    if path_words & RESEARCH_PATH_WORDS:
        return BookmarkCategory.RESEARCH

    return None


def parse_category(raw: str | None) -> BookmarkCategory:
    """Accept only the exact category literals; anything else is an Article."""
    value = (raw or "").strip()
    for category in BookmarkCategory:
        if value == category.value:
            return category
    return BookmarkCategory.ARTICLE


def parse_tags(raw: str | None) -> list[str]:
    """Parse the provider's JSON tag array and clean each entry.

    Raises ``TagParseError`` when the payload is not a JSON array of strings.
    """
    text = (raw or "").strip()
    fenced = _CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        tags = _TAG_LIST.validate_json(text, strict=True)
    except ValidationError as err:
        raise TagParseError(f"Unexpected tag payload: {text[:100]!r}") from err

    cleaned: list[str] = []
    for tag in tags:
        value = tag.strip().lower()
        if not value or value in GENERIC_TAGS or len(value) > MAX_TAG_LENGTH:
            continue
        if value not in cleaned:
            cleaned.append(value)
    return cleaned


def build_provider(config: ProviderConfig) -> LLMProvider:
    """Create the provider adapter for ``config``.

    Raises ``ConfigurationError`` before any network call when the selection
    is unknown or its credential is missing.
    """
    if not config.provider:
        raise ConfigurationError("AI provider not specified")
    try:
        provider = AIProvider(config.provider)
    except ValueError as err:
        raise ConfigurationError("Invalid AI provider specified") from err

    api_key = (config.api_key or "").strip()
    if provider is AIProvider.OPENAI:
        if not api_key:
            raise ConfigurationError("OpenAI API key is required. Please add it in your account settings.")
        return OpenAIProvider(get_openai_client(api_key))

    if not api_key:
        raise ConfigurationError("Claude API key is required. Please add it in your account settings.")
    return AnthropicProvider(get_anthropic_client(api_key))


class AnalysisService:
    """Runs summary, tag and category generation for fetched content.

    The three generations run concurrently and fail independently: each one
    that raises is replaced by its fallback value, so ``analyze`` always
    returns a complete ``AnalysisResult``.
    """

    def __init__(self, provider_factory: Callable[[ProviderConfig], LLMProvider] = build_provider) -> None:
        self._provider_factory = provider_factory

    async def analyze(self, url: str, content: str, config: ProviderConfig) -> AnalysisResult:
        try:
            provider = self._provider_factory(config)
        except ConfigurationError as err:
            logger.warning("AI analysis not configured: %s", err, extra={"url": url})
            return AnalysisResult(
                summary=f"AI analysis failed: {err}. Please try again later.",
                tags=[],
                category=BookmarkCategory.ARTICLE,
            )

        logger.info("Starting content analysis with %s", provider.name, extra={"url": url})

        summary_task = asyncio.create_task(self._summarize(provider, content, url))
        tags_task = asyncio.create_task(self._generate_tags(provider, content, url))
        category_task = asyncio.create_task(self._categorize(provider, content, url))
        await asyncio.gather(summary_task, tags_task, category_task)

        result = AnalysisResult(
            summary=summary_task.result(),
            tags=tags_task.result(),
            category=category_task.result(),
        )
        logger.info(
            "Analysis complete - summary length: %d, tags: %s, category: %s",
            len(result.summary),
            result.tags,
            result.category.value,
        )
        return result

    async def _summarize(self, provider: LLMProvider, content: str, url: str) -> str:
        try:
            summary = (await provider.generate_summary(content, url)).strip()
        except Exception as err:
            logger.error("Summary generation failed: %s", err, extra={"error_type": type(err).__name__})
            return SUMMARY_FAILED
        return summary or NO_SUMMARY

    async def _generate_tags(self, provider: LLMProvider, content: str, url: str) -> list[str]:
        try:
            raw = await provider.generate_tags(content, url)
            logger.debug("Raw tag response: %s", raw)
            return parse_tags(raw)
        except TagParseError as err:
            logger.warning("Discarding unparseable tags: %s", err)
            return []
        except Exception as err:
            logger.error("Tag generation failed: %s", err, extra={"error_type": type(err).__name__})
            return []

    async def _categorize(self, provider: LLMProvider, content: str, url: str) -> BookmarkCategory:
        known = category_from_url(url)
        if known is not None:
            logger.debug("Category determined from URL: %s", known.value)
            return known
        try:
            raw = await provider.classify(content, url)
        except Exception as err:
            logger.error("Category determination failed: %s", err, extra={"error_type": type(err).__name__})
            return BookmarkCategory.ARTICLE

        category = parse_category(raw)
        if category.value != (raw or "").strip():
            logger.info("Provider returned invalid category %r, defaulting to Article", raw)
        return category
