"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import Field

from guardroster.core.roles import Role
from guardroster.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN
from guardroster.schemas.base import ApiModel


class LoginRequest(ApiModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class TokenResponse(ApiModel):
    """Session token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime
    user_id: str
    role: Role


class SessionInfo(ApiModel):
    """The resolved session of the caller."""

    user_id: str
    role: Role
    issued_at: datetime
    expires_at: datetime


class LogoutResponse(ApiModel):
    message: str = "Logged out."
