"""Session authentication: login, token validation, logout and revocation bookkeeping."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import jwt
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guardroster.core.errors import DependencyFailure, InvalidCredentials, Unauthenticated
from guardroster.core.roles import Role
from guardroster.core.security import (
    create_access_token,
    decode_access_token,
    dummy_password_hash,
    verify_password,
)
from guardroster.models import RevokedToken, User
from guardroster.services.policy import Operation, Principal, ResourceType, enforce

if TYPE_CHECKING:
    from guardroster.core.config import Settings

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"
    INVALID = "invalid"


@dataclass(frozen=True)
class AuthSession:
    """A validated session: who is calling, with which role, until when."""

    principal_id: str
    role: Role
    token_id: str
    issued_at: datetime
    expires_at: datetime

    @property
    def principal(self) -> Principal:
        return Principal(id=self.principal_id, role=self.role)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def _timestamp(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=UTC)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; they were written as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _session_from_claims(claims: dict[str, Any]) -> AuthSession:
    """Build an AuthSession from decoded claims; raises Unauthenticated on a bad payload."""
    try:
        return AuthSession(
            principal_id=str(claims["sub"]),
            role=Role(claims["role"]),
            token_id=str(claims["jti"]),
            issued_at=_timestamp(claims["iat"]),
            expires_at=_timestamp(claims["exp"]),
        )
    except (KeyError, TypeError, ValueError):
        raise Unauthenticated("Invalid token payload")


class SessionAuthenticator:
    """Issues and checks session tokens against the credential store passed in."""

    def __init__(self, db: Session, settings: "Settings") -> None:
        self.db = db
        self.settings = settings

    def authenticate(self, email: str, password: str) -> tuple[AuthSession, str]:
        """
        Verify credentials and issue a session token.

        Unknown email and wrong password raise the same InvalidCredentials error;
        the unknown-email path still pays for one bcrypt comparison.
        """
        enforce(None, Operation.AUTHENTICATE, ResourceType.USER)
        normalized = email.strip().lower()
        try:
            user = self.db.query(User).filter(User.email == normalized).first()
        except SQLAlchemyError as e:
            logger.error("Credential lookup failed", extra={"error": str(e)[:200]})
            raise DependencyFailure("Credential store unavailable.") from e

        if user is None:
            verify_password(password, dummy_password_hash())
            logger.info("Authentication failed", extra={"reason": "unknown_email"})
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.info(
                "Authentication failed",
                extra={"reason": "password_mismatch", "user_id": user.id},
            )
            raise InvalidCredentials()

        now = datetime.now(UTC).replace(microsecond=0)
        session = AuthSession(
            principal_id=user.id,
            role=user.role,
            token_id=uuid4().hex,
            issued_at=now,
            expires_at=now + timedelta(minutes=self.settings.JWT_EXPIRE_MINUTES),
        )
        token = create_access_token(
            sub=session.principal_id,
            role=session.role.value,
            token_id=session.token_id,
            issued_at=session.issued_at,
            expires_delta=session.expires_at - session.issued_at,
        )
        logger.info("Session issued", extra={"user_id": user.id, "role": user.role.value})
        return session, token

    def validate(self, token: str | None) -> AuthSession:
        """Return the session for token; raise Unauthenticated if missing, invalid, expired or revoked."""
        if not token:
            raise Unauthenticated("Not authenticated")
        try:
            claims = decode_access_token(token)
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Session expired")
        except jwt.PyJWTError:
            raise Unauthenticated("Invalid or expired token")
        session = _session_from_claims(claims)

        try:
            revoked = self.db.get(RevokedToken, session.token_id)
            user = self.db.get(User, session.principal_id)
        except SQLAlchemyError as e:
            logger.error("Session lookup failed", extra={"error": str(e)[:200]})
            raise DependencyFailure("Session store unavailable.") from e
        if revoked is not None:
            raise Unauthenticated("Session revoked")
        if user is None:
            raise Unauthenticated("User not found")
        if user.role is not session.role:
            # Role changed after the token was issued; force a fresh login.
            raise Unauthenticated("Session no longer valid")
        changed_at = _as_utc(user.password_changed_at)
        if changed_at is not None and session.issued_at < changed_at:
            raise Unauthenticated("Session no longer valid")
        return session

    def state(self, token: str) -> SessionState:
        """Classify a token as active, expired, revoked or invalid. Only a store failure raises."""
        try:
            claims = decode_access_token(token, verify_exp=False)
        except jwt.PyJWTError:
            return SessionState.INVALID
        jti = claims.get("jti")
        if jti:
            try:
                revoked = self.db.get(RevokedToken, str(jti))
            except SQLAlchemyError as e:
                logger.error("Session lookup failed", extra={"error": str(e)[:200]})
                raise DependencyFailure("Session store unavailable.") from e
            if revoked is not None:
                return SessionState.REVOKED
        try:
            if _timestamp(claims["exp"]) <= datetime.now(UTC):
                return SessionState.EXPIRED
        except (KeyError, TypeError, ValueError):
            return SessionState.INVALID
        return SessionState.ACTIVE

    def terminate(self, token: str | None) -> bool:
        """
        Revoke the session carried by token. Returns True if a revocation was recorded.

        Expired, invalid or already revoked tokens are terminal already; that is not an error.
        """
        if not token:
            return False
        state = self.state(token)
        if state is not SessionState.ACTIVE:
            logger.info("Logout for inactive session", extra={"session_state": state.value})
            return False
        try:
            session = _session_from_claims(decode_access_token(token))
        except (jwt.PyJWTError, Unauthenticated):
            return False
        try:
            self.db.add(
                RevokedToken(
                    token_id=session.token_id,
                    user_id=session.principal_id,
                    expires_at=session.expires_at,
                )
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Session revocation failed", extra={"error": str(e)[:200]})
            raise DependencyFailure("Session store unavailable.") from e
        logger.info("Session revoked", extra={"user_id": session.principal_id})
        return True


def purge_expired_revocations(db: Session, now: datetime | None = None) -> int:
    """Delete revocation rows whose token has expired anyway. Returns the number deleted."""
    cutoff = now or datetime.now(UTC)
    deleted = (
        db.query(RevokedToken)
        .filter(RevokedToken.expires_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
