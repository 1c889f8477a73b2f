"""Staff account lifecycle: list, create, change role/password, delete."""

import logging
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from guardroster.core.errors import Conflict, InvalidInput, NotFound
from guardroster.core.security import hash_password
from guardroster.models import Message, Shift, Upload, User
from guardroster.schemas.user import UserCreate, UserUpdate
from guardroster.services.policy import Operation, ResourceType, enforce
from guardroster.services.sessions import AuthSession
from guardroster.services.store import store_call

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "A user with this email already exists."
STILL_OWNS_MESSAGE = "User still owns shifts, messages or uploads; remove or reassign them first."


def create_principal(db: Session, payload: UserCreate) -> User:
    """Insert a new account without a policy check (callers authorize first)."""
    with store_call(db, "look up user"):
        existing = db.query(User).filter(User.email == payload.email).first()
    if existing is not None:
        raise Conflict(DUPLICATE_EMAIL_MESSAGE, fields=["email"])

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    with store_call(
        db, "create user", commit=True, refresh=user, conflict_message=DUPLICATE_EMAIL_MESSAGE
    ):
        db.add(user)
    logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
    return user


class UserManager:
    """Admin-only management of accounts. Password hashes never leave this class."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list(self, session: AuthSession) -> list[User]:
        enforce(session.principal, Operation.READ, ResourceType.USER)
        with store_call(self.db, "list users"):
            return self.db.query(User).order_by(User.name, User.email).all()

    def create(self, session: AuthSession, payload: UserCreate) -> User:
        enforce(session.principal, Operation.CREATE, ResourceType.USER)
        return create_principal(self.db, payload)

    def update(self, session: AuthSession, user_id: str, payload: UserUpdate) -> User:
        """Change role and/or password. Either change ends the user's existing sessions."""
        if payload.role is None and payload.password is None:
            raise InvalidInput("Provide a role or a password to change.", fields=["role", "password"])
        enforce(session.principal, Operation.UPDATE, ResourceType.USER, user_id)
        user = self._get(user_id)
        if payload.role is not None:
            user.role = payload.role
        if payload.password is not None:
            user.password_hash = hash_password(payload.password)
            user.password_changed_at = datetime.now(UTC).replace(microsecond=0)
        with store_call(self.db, "update user", commit=True, refresh=user):
            self.db.add(user)
        logger.info(
            "User updated",
            extra={
                "user_id": user.id,
                "role_changed": payload.role is not None,
                "password_changed": payload.password is not None,
            },
        )
        return user

    def delete(self, session: AuthSession, user_id: str) -> None:
        """
        Delete an account. Accounts that still own shifts, messages or uploads are
        kept (Conflict) so no row is left pointing at a missing user.
        """
        enforce(session.principal, Operation.DELETE, ResourceType.USER, user_id)
        user = self._get(user_id)
        owned = self._owned_counts(user_id)
        if any(owned.values()):
            summary = ", ".join(f"{count} {name}" for name, count in owned.items() if count)
            raise Conflict(f"User still owns {summary}; remove or reassign them first.")
        with store_call(
            self.db, "delete user", commit=True, conflict_message=STILL_OWNS_MESSAGE
        ):
            self.db.delete(user)
        logger.info("User deleted", extra={"user_id": user_id})

    def _get(self, user_id: str) -> User:
        with store_call(self.db, "look up user"):
            user = self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def _owned_counts(self, user_id: str) -> dict[str, int]:
        counts: dict[str, int] = {}
        with store_call(self.db, "count owned resources"):
            for name, model in (("shifts", Shift), ("messages", Message), ("uploads", Upload)):
                counts[name] = (
                    self.db.query(func.count(model.id)).filter(model.user_id == user_id).scalar()
                    or 0
                )
        return counts
