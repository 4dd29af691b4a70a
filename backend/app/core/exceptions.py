from __future__ import annotations


class BookmarksError(Exception):
    """Base class for domain errors raised by the bookmarks core."""


class ConfigurationError(BookmarksError):
    """AI provider selection or credential is missing or invalid.

    Raised before any network call is made; never retried.
    """


class ProviderCallError(BookmarksError):
    """A single provider generation call failed (timeout, non-2xx, bad payload)."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class TagParseError(ProviderCallError):
    """The provider's tag response was not a JSON array of strings."""


class ContentFetchError(BookmarksError):
    """Fetching or parsing a bookmarked page failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
