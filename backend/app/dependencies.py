from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import TYPE_CHECKING

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import settings
from app.core.repositories.implementations.supabase.bookmark_repository import (
    SupabaseBookmarkRepository,
)
from app.core.repositories.implementations.supabase.folder_repository import (
    SupabaseFolderRepository,
)
from app.core.repositories.implementations.supabase.user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from app.core.schemas.auth import AuthUser
from app.core.services.analysis_service import AnalysisService
from app.core.services.bookmark_service import BookmarkService
from app.core.services.chat_service import ChatService
from app.core.services.content_fetcher import ContentFetcher
from app.core.services.folder_service import FolderService
from app.core.services.settings_service import SettingsService
from app.db.base import create_request_supabase_client
from app.utils.expiring_store import AttemptLimiter
from app.utils.logging import get_logger

logger = get_logger(__name__)

# Use auto_error=False to handle missing tokens gracefully
http_bearer = HTTPBearer(auto_error=False)

if TYPE_CHECKING:
    from supabase import Client

    from app.core.repositories.bookmark_repository import BookmarkRepository
    from app.core.repositories.folder_repository import FolderRepository
    from app.core.repositories.user_settings_repository import UserSettingsRepository


@lru_cache(maxsize=1)
def get_attempt_limiter() -> AttemptLimiter:
    """Process-wide limiter for sign-up/sign-in attempts."""
    return AttemptLimiter(
        max_attempts=settings.max_login_attempts,
        window_seconds=settings.login_attempt_window,
    )


def client_identifier(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit_by_ip(request: Request, operation: str, limiter: AttemptLimiter | None) -> None:
    """Count an attempt for ``operation`` from the caller's IP.

    Raises:
        HTTPException: 429 with Retry-After when the window's budget is spent
    """
    if limiter is None or not settings.enable_rate_limiting:
        return
    client_ip = client_identifier(request)
    identifier = f"{operation}:{client_ip}"
    if not limiter.hit(identifier):
        return

    logger.warning("Rate limited %s attempt", operation, extra={"ip": client_ip})
    seconds_until_reset = limiter.seconds_until_reset(identifier)
    headers = {
        "Retry-After": str(seconds_until_reset),
        "RateLimit-Limit": str(limiter.max_attempts),
        "RateLimit-Remaining": "0",
        "RateLimit-Reset": str(seconds_until_reset),
    }
    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=f"Too many {operation} attempts. Please try again later.",
        headers=headers,
    )


def get_request_supabase_client(request: Request) -> Client:
    """Create a request-scoped Supabase client and set PostgREST bearer.

    Extracts the Authorization: Bearer <jwt> header if present and configures
    PostgREST to enforce RLS for the user.
    """
    auth_header = request.headers.get("authorization") or request.headers.get("Authorization")
    jwt: str | None = None
    if auth_header and auth_header.lower().startswith("bearer "):
        jwt = auth_header.split(" ", 1)[1].strip()
    return create_request_supabase_client(jwt)


def get_bookmark_repository(client: Client = Depends(get_request_supabase_client)) -> BookmarkRepository:
    return SupabaseBookmarkRepository(client)


def get_folder_repository(client: Client = Depends(get_request_supabase_client)) -> FolderRepository:
    return SupabaseFolderRepository(client)


def get_user_settings_repository(
    client: Client = Depends(get_request_supabase_client),
) -> UserSettingsRepository:
    return SupabaseUserSettingsRepository(client)


@lru_cache(maxsize=1)
def get_content_fetcher() -> ContentFetcher:
    return ContentFetcher()


@lru_cache(maxsize=1)
def get_analysis_service() -> AnalysisService:
    return AnalysisService()


def get_bookmark_service(
    repo: BookmarkRepository = Depends(get_bookmark_repository),
    settings_repo: UserSettingsRepository = Depends(get_user_settings_repository),
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    analyzer: AnalysisService = Depends(get_analysis_service),
) -> BookmarkService:
    """Get a request-scoped bookmark service instance."""
    return BookmarkService(repo, settings_repo, fetcher=fetcher, analyzer=analyzer)


def get_folder_service(
    repo: FolderRepository = Depends(get_folder_repository),
    bookmark_repo: BookmarkRepository = Depends(get_bookmark_repository),
) -> FolderService:
    return FolderService(repo, bookmark_repo)


def get_settings_service(
    repo: UserSettingsRepository = Depends(get_user_settings_repository),
) -> SettingsService:
    return SettingsService(repo)


def get_chat_service(
    bookmark_repo: BookmarkRepository = Depends(get_bookmark_repository),
    settings_repo: UserSettingsRepository = Depends(get_user_settings_repository),
) -> ChatService:
    return ChatService(bookmark_repo, settings_repo)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(http_bearer),
) -> AuthUser:
    """Validate JWT via Supabase and return authenticated user."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    jwt = credentials.credentials
    if not jwt or len(jwt.split(".")) != 3:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format",
            headers={"WWW-Authenticate": "Bearer"},
        )
    supabase = create_request_supabase_client(jwt)
    try:
        resp = await asyncio.to_thread(lambda: supabase.auth.get_user(jwt))
    except Exception as err:
        error_msg = str(err).lower()
        logger.warning(
            "JWT validation failed",
            extra={
                "error_type": type(err).__name__,
                "error_summary": error_msg[:100] if error_msg else "Unknown error",
                "jwt_length": len(jwt),
            }
        )
        if "invalid" in error_msg or "expired" in error_msg:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token is invalid or expired",
                headers={"WWW-Authenticate": "Bearer"},
            ) from err
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        ) from err
    user = getattr(resp, "user", None)
    user_id = getattr(user, "id", None)
    if not user or not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user data",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthUser(
        id=user_id,
        email=getattr(user, "email", None) or "",
        role=getattr(user, "role", None),
    )


def get_auth_service(
    client: Client = Depends(get_request_supabase_client),
    limiter: AttemptLimiter = Depends(get_attempt_limiter),
):
    """Get a request-scoped auth service instance."""
    from app.core.services.auth_service import AuthService
    return AuthService(client, limiter)
