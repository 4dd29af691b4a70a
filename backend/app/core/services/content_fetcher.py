from __future__ import annotations

import asyncio
import re
from typing import TYPE_CHECKING

import httpx
from bs4 import BeautifulSoup
from youtube_transcript_api import YouTubeTranscriptApi

from app.config import settings
from app.core.exceptions import ContentFetchError
from app.core.schemas.analysis import FetchedContent
from app.utils.logging import get_logger
from app.utils.url_cleaner import clean_url, extract_youtube_video_id, is_youtube_url

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "max-age=0",
}

YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"

REMOVED_TAGS = ("script", "style", "noscript", "nav", "header", "footer", "iframe")
CHROME_CLASS_RE = re.compile(r"(menu|sidebar|banner|(^|[-_])ads?([-_]|$))", re.IGNORECASE)
MAIN_SELECTORS = (
    "article",
    "main",
    '[role="main"]',
    ".content",
    "#content",
    ".post",
    ".article",
    ".post-content",
    ".article-content",
)

_WHITESPACE_RE = re.compile(r"\s+")


def _fetch_transcript(video_id: str) -> str | None:
    """Blocking transcript download; returns None when YouTube has none."""
    try:
        fetched = YouTubeTranscriptApi().fetch(video_id, languages=["en"])
    except Exception as err:
        logger.info("Transcript unavailable for %s: %s", video_id, err)
        return None
    text = " ".join(snippet.text for snippet in fetched.snippets)
    return text or None


def _is_page_chrome(tag) -> bool:
    classes = tag.get("class") or []
    return any(CHROME_CLASS_RE.search(cls) for cls in classes)


def extract_page(html: str, url: str) -> FetchedContent:
    """Pull title, description and main text out of an HTML document."""
    soup = BeautifulSoup(html, "html.parser")

    def meta(**attrs) -> str:
        node = soup.find("meta", attrs=attrs)
        return (node.get("content") or "").strip() if node else ""

    # Metadata is read before the page chrome is stripped
    page_title = soup.title.get_text(strip=True) if soup.title else ""
    first_h1 = soup.find("h1")
    title = (
        meta(property="og:title")
        or page_title
        or (first_h1.get_text(strip=True) if first_h1 else "")
        or url.rstrip("/").split("/")[-1]
        or "Untitled"
    )

    for node in soup(list(REMOVED_TAGS)):
        node.decompose()
    for node in soup.find_all(_is_page_chrome):
        if not node.decomposed:
            node.decompose()

    content = ""
    for selector in MAIN_SELECTORS:
        elements = soup.select(selector)
        if elements:
            content = " ".join(el.get_text(" ") for el in elements)
            break

    if not content.strip() and soup.body:
        content = soup.body.get_text(" ")

    content = _WHITESPACE_RE.sub(" ", content).strip()

    description = (
        meta(property="og:description")
        or meta(name="description")
        or (content[:200] + "..." if content else "")
    )

    return FetchedContent(
        title=title.strip(),
        content=content,
        description=description.strip(),
        is_youtube=False,
    )


class ContentFetcher:
    """Fetches a bookmarked page and returns its readable text.

    YouTube links are resolved through oEmbed plus the video transcript, other
    pages are downloaded and stripped down to their main content.
    """

    def __init__(
        self,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        transcript_fetcher: Callable[[str], str | None] = _fetch_transcript,
    ) -> None:
        self._client_factory = client_factory or self._default_client
        self._transcript_fetcher = transcript_fetcher

    @staticmethod
    def _default_client() -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=DEFAULT_HEADERS,
            timeout=settings.fetch_timeout,
            follow_redirects=True,
            max_redirects=settings.fetch_max_redirects,
        )

    async def fetch(self, url: str) -> FetchedContent:
        cleaned = clean_url(url)
        logger.info("Fetching content from URL: %s", cleaned)
        try:
            if is_youtube_url(cleaned):
                return await self._fetch_youtube(cleaned)
            return await self._fetch_page(cleaned)
        except ContentFetchError:
            raise
        except httpx.ConnectError as err:
            raise ContentFetchError(
                "Could not connect to the website. Please check the URL and try again."
            ) from err
        except httpx.TimeoutException as err:
            raise ContentFetchError("Request timed out. Please try again.") from err
        except httpx.HTTPStatusError as err:
            raise self._status_error(err.response.status_code) from err
        except httpx.HTTPError as err:
            raise ContentFetchError(f"Failed to fetch content: {err or type(err).__name__}") from err

    @staticmethod
    def _status_error(status_code: int) -> ContentFetchError:
        messages = {
            403: "Access to this website is forbidden. The website might be blocking our requests.",
            404: "The page could not be found. Please check the URL and try again.",
            429: "Too many requests to this website. Please try again later.",
        }
        message = messages.get(status_code, f"Failed to fetch content: HTTP {status_code}")
        return ContentFetchError(message, status_code=status_code)

    async def _fetch_page(self, url: str) -> FetchedContent:
        async with self._client_factory() as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                chunks: list[bytes] = []
                total = 0
                async for chunk in response.aiter_bytes():
                    total += len(chunk)
                    if total > settings.fetch_max_bytes:
                        break
                    chunks.append(chunk)
                encoding = response.encoding or "utf-8"

        html = b"".join(chunks).decode(encoding, errors="ignore")
        page = extract_page(html, url)
        logger.info(
            "Successfully fetched content",
            extra={"title": page.title, "content_length": len(page.content), "url": url},
        )
        return page

    async def _fetch_youtube(self, url: str) -> FetchedContent:
        video_id = extract_youtube_video_id(url)
        if not video_id:
            raise ContentFetchError("Invalid YouTube URL")

        async with self._client_factory() as client:
            response = await client.get(YOUTUBE_OEMBED_URL, params={"url": url, "format": "json"})
            response.raise_for_status()
            data = response.json()

        title = (data.get("title") or "").strip() or "Untitled"
        author = (data.get("author_name") or "").strip() or "unknown author"

        transcript = await asyncio.to_thread(self._transcript_fetcher, video_id)
        if transcript:
            content = f"Title: {title}\nAuthor: {author}\n\nTranscript:\n{transcript}"
        else:
            content = f"YouTube video by {author}. Video ID: {video_id}"

        return FetchedContent(
            title=title,
            content=content,
            description=f"YouTube video: {title} by {author}",
            is_youtube=True,
            has_transcript=bool(transcript),
        )
