from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from fastapi import Request
    from starlette.types import ASGIApp

logger = get_logger(__name__)


def build_csp_policy(supabase_url: str) -> str:
    """CSP allowing API calls to this host and the configured Supabase project."""
    parts = urlsplit(supabase_url or "")
    supabase_origin = f"{parts.scheme}://{parts.netloc}" if parts.scheme and parts.netloc else ""
    connect_src = " ".join(filter(None, ["'self'", supabase_origin]))
    return (
        "default-src 'self'; "
        "script-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:; "
        "font-src 'self' data:; "
        f"connect-src {connect_src}; "
        "frame-ancestors 'none';"
    )


class SecurityMiddleware(BaseHTTPMiddleware):
    """Adds security headers and logs access to the auth endpoints."""

    def __init__(self, app: ASGIApp, *, auth_path_prefix: str | None = None):
        super().__init__(app)
        self._csp_policy = build_csp_policy(settings.supabase_url)
        self._auth_path_prefix = auth_path_prefix or f"{settings.api_prefix}/auth"

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = self._csp_policy

        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"

        # Bookmark payloads carry per-user data
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        response.headers["Pragma"] = "no-cache"

        if request.url.path.startswith(self._auth_path_prefix):
            client_ip = request.client.host if request.client else "unknown"
            user_agent = request.headers.get("user-agent", "unknown")

            logger.info(
                "Auth endpoint accessed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "ip": client_ip,
                    "user_agent": user_agent[:100],
                    "status_code": response.status_code,
                }
            )

        return response
