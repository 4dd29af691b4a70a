from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

from app.utils.logging import get_logger

logger = get_logger(__name__)

YOUTUBE_HOSTS = {"youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be"}


def _with_scheme(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        return f"https://{url}"
    return url


def is_youtube_url(url: str) -> bool:
    """Return True when the URL points at a YouTube host."""
    try:
        host = (urlsplit(_with_scheme(url)).hostname or "").lower()
    except ValueError:
        return False
    return host in YOUTUBE_HOSTS


def extract_youtube_video_id(url: str) -> str | None:
    """Extract the video id from watch, shorts and youtu.be links."""
    try:
        parts = urlsplit(_with_scheme(url))
    except ValueError as err:
        logger.debug("Could not parse YouTube URL %s: %s", url, err)
        return None

    host = (parts.hostname or "").lower()
    if host == "youtu.be":
        video_id = parts.path.lstrip("/").split("/")[0]
        return video_id or None

    if host in YOUTUBE_HOSTS:
        values = parse_qs(parts.query).get("v")
        if values and values[0]:
            return values[0]
        segments = [s for s in parts.path.split("/") if s]
        if len(segments) >= 2 and segments[0] in {"shorts", "embed", "live"}:
            return segments[1]
    return None


def clean_url(url: str) -> str:
    """Normalize a bookmark URL so the same page always maps to one string.

    - adds https:// when no scheme is given
    - rewrites YouTube video links to https://youtu.be/<id>
    - drops a leading "www.", the query string and the fragment
    - removes a trailing slash

    Returns the input unchanged when it cannot be parsed.
    """
    if not url:
        return ""

    candidate = _with_scheme(url)
    try:
        if is_youtube_url(candidate):
            video_id = extract_youtube_video_id(candidate)
            if video_id:
                return f"https://youtu.be/{video_id}"

        parts = urlsplit(candidate)
        host = parts.hostname or ""
        if not host:
            return url
        if host.startswith("www."):
            host = host[4:]
        netloc = f"{host}:{parts.port}" if parts.port else host
    except ValueError as err:
        logger.warning("Error cleaning URL %s: %s", url, err)
        return url

    cleaned = f"{parts.scheme}://{netloc}{parts.path}"
    if cleaned.endswith("/"):
        cleaned = cleaned.rstrip("/")
    return cleaned
