from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.v1.schemas.auth import (
    AuthResponse,
    PasswordChangeRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    SignInRequest,
    SignUpRequest,
)
from app.dependencies import (
    get_auth_service,
    get_current_user,
)
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from app.core.schemas.auth import AuthUser
    from app.core.services.auth_service import AuthService

logger = get_logger(__name__)

T = TypeVar("T")

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        429: {"description": "Too many requests"}
    }
)


async def _run_auth_call(operation: str, call: Awaitable[T]) -> T:
    """Map auth service failures: ValueError -> 400, anything else -> 500.

    HTTPExceptions (rate limiting) pass through unchanged.
    """
    try:
        return await call
    except HTTPException:
        raise
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err
    except Exception as err:
        logger.error("Unexpected error during %s", operation, extra={"error": str(err)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from err


@router.post("/signup", response_model=AuthResponse)
async def sign_up_with_password(
    request: Request,
    payload: SignUpRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign up with email and password."""
    return await _run_auth_call("signup", auth_service.sign_up(request, payload))


@router.post("/signin", response_model=AuthResponse)
async def sign_in_with_password(
    request: Request,
    payload: SignInRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign in with email and password."""
    return await _run_auth_call("signin", auth_service.sign_in(request, payload))


@router.post("/signout")
async def sign_out(
    current_user: AuthUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    return await auth_service.sign_out(current_user)


@router.get("/validate")
async def validate_token(current_user: AuthUser = Depends(get_current_user)):
    """Validate the current user's token and return user info."""
    return {
        "id": str(current_user.id),
        "email": current_user.email,
        "role": current_user.role,
    }


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange a refresh token (bearer header or JSON body) for a new session."""
    return await _run_auth_call("token refresh", auth_service.refresh_token(request))


@router.put("/password")
async def change_password(
    request: Request,
    payload: PasswordChangeRequest,
    current_user: AuthUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Change the password after confirming the current one."""
    return await _run_auth_call(
        "password change", auth_service.change_password(request, current_user, payload)
    )


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    request: Request,
    payload: ProfileUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Change the account email and/or display name.

    AI provider settings live under ``/settings``.
    """
    return await _run_auth_call(
        "profile update", auth_service.update_profile(request, current_user, payload)
    )
