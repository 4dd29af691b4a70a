from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from app.api.v1.schemas.auth import (
    AuthResponse,
    PasswordChangeRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    SignInRequest,
    SignUpRequest,
)
from app.dependencies import client_identifier, rate_limit_by_ip
from app.utils.logging import get_logger
from app.utils.validation import validate_password_strength

if TYPE_CHECKING:
    from fastapi import Request

    from app.core.schemas.auth import AuthUser
    from app.utils.expiring_store import AttemptLimiter


logger = get_logger(__name__)

SIGNUP_DISABLED_PHRASES = (
    "signup disabled",
    "signups disabled",
    "email signups disabled",
    "disable signup",
    "signups not allowed",
    "signup not allowed",
)


def _auth_response(resp: Any) -> AuthResponse:
    return AuthResponse(
        access_token=resp.session.access_token,
        token_type="bearer",
        expires_in=resp.session.expires_in,
        refresh_token=resp.session.refresh_token,
        user={
            "id": str(resp.user.id),
            "email": resp.user.email or "",
        },
    )


class AuthService:
    """Email/password authentication against Supabase Auth.

    Sign-up and sign-in attempts are counted per client IP by the injected
    ``AttemptLimiter``; passing None disables rate limiting.
    """

    def __init__(self, supabase_client: Any, limiter: AttemptLimiter | None = None):
        self.supabase = supabase_client
        self.limiter = limiter

    async def sign_up(self, request: Request, payload: SignUpRequest) -> AuthResponse:
        rate_limit_by_ip(request, "signup", self.limiter)

        is_valid_password, password_error = validate_password_strength(payload.password)
        if not is_valid_password:
            raise ValueError(password_error)

        email = payload.email.lower().strip()
        password = payload.password

        try:
            resp = await asyncio.to_thread(
                lambda: self.supabase.auth.sign_up({
                    "email": email,
                    "password": password,
                })
            )
        except Exception as err:
            error_msg = str(err).lower()

            logger.warning(
                "Sign up failed",
                extra={
                    "email": email,
                    "error_type": type(err).__name__,
                    "error_summary": error_msg[:100] if error_msg else "Unknown error",
                }
            )

            # Invite-only deployments disable signups in Supabase
            if any(phrase in error_msg for phrase in SIGNUP_DISABLED_PHRASES):
                raise ValueError("Signups are disabled. Please request an invite.") from err

            if "already registered" in error_msg or "already exists" in error_msg:
                raise ValueError("An account with this email already exists") from err
            elif "invalid email" in error_msg:
                raise ValueError("Invalid email format") from err
            elif "weak password" in error_msg:
                raise ValueError("Password does not meet security requirements") from err
            else:
                raise ValueError("Failed to create account. Please try again.") from err

        if not resp.user or not getattr(resp, "session", None):
            raise ValueError("Account created but session not established. Please confirm your email or sign in.")

        logger.info("User signed up successfully", extra={"email": resp.user.email or "", "user_id": str(resp.user.id)})
        return _auth_response(resp)

    async def sign_in(self, request: Request, payload: SignInRequest) -> AuthResponse:
        rate_limit_by_ip(request, "signin", self.limiter)

        email = payload.email.lower().strip()
        password = payload.password

        if not email or not password:
            raise ValueError("Email and password are required")

        try:
            resp = await asyncio.to_thread(
                lambda: self.supabase.auth.sign_in_with_password({
                    "email": email,
                    "password": password,
                })
            )
        except Exception as err:
            error_msg = str(err).lower()

            logger.warning(
                "Sign in failed",
                extra={
                    "email": email,
                    "error_type": type(err).__name__,
                    "error_summary": error_msg[:100] if error_msg else "Unknown error",
                }
            )

            if "invalid login credentials" in error_msg or "invalid email or password" in error_msg:
                raise ValueError("Invalid email or password") from err
            elif "email not confirmed" in error_msg:
                raise ValueError("Please confirm your email address before signing in") from err
            elif "too many requests" in error_msg:
                raise ValueError("Too many signin attempts. Please try again later.") from err
            else:
                raise ValueError("Authentication service error. Please try again.") from err

        if not resp.user or not getattr(resp, "session", None):
            raise ValueError("Invalid email or password")

        if self.limiter is not None:
            self.limiter.reset(f"signin:{client_identifier(request)}")

        logger.info("User signed in successfully", extra={"email": resp.user.email or "", "user_id": str(resp.user.id)})
        return _auth_response(resp)

    async def sign_out(self, current_user: AuthUser) -> dict[str, str]:
        """Sign out; failures are logged but still reported as success."""
        try:
            await asyncio.to_thread(lambda: self.supabase.auth.sign_out())
            logger.info("User signed out successfully", extra={"user_id": str(current_user.id)})
        except Exception as err:
            logger.warning("Sign out failed", extra={"error": str(err), "user_id": str(current_user.id)})
        return {"message": "Signed out successfully"}

    async def refresh_token(self, request: Request) -> AuthResponse:
        """Refresh the access token from a bearer header or a JSON body."""
        refresh_token = None

        auth_header = request.headers.get("authorization") or request.headers.get("Authorization")
        if auth_header and auth_header.lower().startswith("bearer "):
            refresh_token = auth_header.split(" ", 1)[1].strip()

        if not refresh_token:
            try:
                body = await request.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                refresh_token = body.get("refresh_token")

        if not refresh_token:
            raise ValueError("Refresh token is required")

        try:
            resp = await asyncio.to_thread(
                lambda: self.supabase.auth.refresh_session(refresh_token)
            )
        except Exception as err:
            error_msg = str(err).lower()

            logger.warning("Token refresh failed", extra={"error": error_msg[:100]})

            if "invalid" in error_msg or "expired" in error_msg:
                raise ValueError("Invalid or expired refresh token") from err
            else:
                raise ValueError("Failed to refresh token") from err

        if not resp.user or not getattr(resp, "session", None):
            raise ValueError("Invalid refresh token")

        return _auth_response(resp)

    async def _reauthenticate(self, request: Request, current_user: AuthUser, password: str) -> None:
        """Confirm the caller knows the current password.

        A successful sign-in also gives this client the session that
        ``auth.update_user`` acts on.
        """
        rate_limit_by_ip(request, "reauthentication", self.limiter)
        if not current_user.email:
            raise ValueError("Account email is unknown. Please sign in again.")
        try:
            resp = await asyncio.to_thread(
                lambda: self.supabase.auth.sign_in_with_password({
                    "email": current_user.email,
                    "password": password,
                })
            )
        except Exception as err:
            logger.warning(
                "Re-authentication failed",
                extra={"user_id": str(current_user.id), "error_type": type(err).__name__},
            )
            raise ValueError("Current password is incorrect") from err

        if not resp.user or not getattr(resp, "session", None):
            raise ValueError("Current password is incorrect")

        if self.limiter is not None:
            self.limiter.reset(f"reauthentication:{client_identifier(request)}")

    async def change_password(
        self, request: Request, current_user: AuthUser, payload: PasswordChangeRequest
    ) -> dict[str, str]:
        is_valid_password, password_error = validate_password_strength(payload.new_password)
        if not is_valid_password:
            raise ValueError(password_error)
        if payload.new_password == payload.current_password:
            raise ValueError("New password must be different from the current password")

        await self._reauthenticate(request, current_user, payload.current_password)

        new_password = payload.new_password
        try:
            await asyncio.to_thread(lambda: self.supabase.auth.update_user({"password": new_password}))
        except Exception as err:
            error_msg = str(err).lower()
            logger.warning(
                "Password update failed",
                extra={"user_id": str(current_user.id), "error_summary": error_msg[:100]},
            )
            if "weak password" in error_msg:
                raise ValueError("Password does not meet security requirements") from err
            raise ValueError("Failed to update password. Please try again.") from err

        logger.info("Password updated", extra={"user_id": str(current_user.id)})
        return {"message": "Password updated successfully"}

    async def update_profile(
        self, request: Request, current_user: AuthUser, payload: ProfileUpdateRequest
    ) -> ProfileResponse:
        """Update the account email and display name.

        Supabase keeps the old address until the new one is confirmed; it is
        reported as ``pending_email`` meanwhile.
        """
        attributes: dict[str, Any] = {}
        if payload.email is not None:
            email = payload.email.lower().strip()
            if email != (current_user.email or "").lower():
                attributes["email"] = email
        if payload.name is not None:
            attributes["data"] = {"name": payload.name}
        if not attributes:
            raise ValueError("Nothing to update")

        await self._reauthenticate(request, current_user, payload.current_password)

        try:
            resp = await asyncio.to_thread(lambda: self.supabase.auth.update_user(attributes))
        except Exception as err:
            error_msg = str(err).lower()
            logger.warning(
                "Profile update failed",
                extra={"user_id": str(current_user.id), "error_summary": error_msg[:100]},
            )
            if "already registered" in error_msg or "already exists" in error_msg:
                raise ValueError("An account with this email already exists") from err
            elif "invalid email" in error_msg:
                raise ValueError("Invalid email format") from err
            raise ValueError("Failed to update profile. Please try again.") from err

        user = resp.user
        metadata = getattr(user, "user_metadata", None) or {}
        logger.info(
            "Profile updated",
            extra={"user_id": str(current_user.id), "fields": sorted(attributes)},
        )
        return ProfileResponse(
            id=str(user.id),
            email=user.email or "",
            name=metadata.get("name"),
            pending_email=getattr(user, "new_email", None),
        )
