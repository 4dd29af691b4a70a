from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator


class SignInRequest(BaseModel):
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=128, description="User's password")


class SignUpRequest(BaseModel):
    """Request to create an account; password strength is checked server side."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=128, description="User's password")


class SessionUser(BaseModel):
    id: str
    email: str = ""


class AuthResponse(BaseModel):
    """Session tokens returned by sign-up, sign-in and refresh."""

    access_token: str = Field(..., description="JWT access token for API calls")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiration time in seconds")
    refresh_token: str | None = Field(default=None, description="Refresh token for token renewal")
    user: SessionUser = Field(..., description="Owner of the session")


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=128, description="Password in use today")
    new_password: str = Field(..., min_length=8, max_length=128, description="Replacement password")


class ProfileUpdateRequest(BaseModel):
    """Change the account email and/or display name.

    Either change requires the current password.
    """

    current_password: str = Field(..., min_length=1, max_length=128)
    email: EmailStr | None = None
    name: str | None = Field(default=None, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        stripped = v.strip()
        if not stripped:
            raise ValueError("Name cannot be empty if provided")
        return stripped


class ProfileResponse(BaseModel):
    id: str
    email: str = ""
    name: str | None = None
    pending_email: str | None = Field(default=None, description="New address awaiting confirmation")
