"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any
from uuid import uuid4

import bcrypt
import jwt

from guardroster.core.config import settings

# Min/max lengths for name, email and password validation.
NAME_MIN_LEN = 1
NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 320
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    cost = rounds if rounds is not None else settings.BCRYPT_ROUNDS
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=cost)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """Hash compared against when the email is unknown, so both failure paths cost one bcrypt check."""
    return hash_password(uuid4().hex)


def create_access_token(
    sub: str,
    role: str,
    *,
    token_id: str | None = None,
    issued_at: datetime | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with sub (user id), role, jti, iat and exp."""
    now = issued_at or datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload: dict[str, Any] = {
        "sub": str(sub),
        "role": role,
        "jti": token_id or uuid4().hex,
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, *, verify_exp: bool = True) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, role, jti, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_exp": verify_exp, "require": ["sub", "exp", "iat"]},
    )
