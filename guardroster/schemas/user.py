"""Request/response schemas for staff accounts."""

from pydantic import Field, field_validator

from guardroster.core.roles import Role
from guardroster.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)
from guardroster.schemas.base import ApiModel


def normalize_email(value: str) -> str:
    """Trim and lower-case; require exactly one '@' with text on both sides."""
    email = value.strip().lower()
    local, sep, domain = email.partition("@")
    if not sep or not local or not domain or "@" in domain or " " in email:
        raise ValueError("email must be a valid address")
    return email


class UserCreate(ApiModel):
    """Payload for creating an account (admin only)."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN)
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must be non-empty")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class UserUpdate(ApiModel):
    """Role and/or password change. At least one field must be set."""

    role: Role | None = None
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )


class UserRead(ApiModel):
    """Account as returned to callers (never includes the password hash)."""

    id: str
    name: str
    email: str
    role: Role
