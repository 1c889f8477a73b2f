"""Builders shared by the tests: in-memory database, users and sessions."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from guardroster.core.roles import Role
from guardroster.core.security import hash_password
from guardroster.models import Base, User
from guardroster.services.sessions import AuthSession

DEFAULT_PASSWORD = "pw123456"


def make_db(*, foreign_keys: bool = False) -> Session:
    """Fresh in-memory SQLite database with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if foreign_keys:
        # SQLite leaves foreign keys unenforced unless asked per connection.
        event.listen(engine, "connect", lambda conn, _record: conn.execute("PRAGMA foreign_keys=ON"))
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


def add_user(
    db: Session,
    *,
    user_id: str | None = None,
    name: str = "Test User",
    email: str | None = None,
    role: Role = Role.USER,
    password: str = DEFAULT_PASSWORD,
) -> User:
    user = User(
        id=user_id or str(uuid4()),
        name=name,
        email=email or f"{uuid4().hex[:8]}@example.test",
        password_hash=hash_password(password, rounds=4),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def session_for(user: User, *, minutes: int = 60) -> AuthSession:
    """A validated session for user, without going through login."""
    now = datetime.now(UTC).replace(microsecond=0)
    return AuthSession(
        principal_id=user.id,
        role=user.role,
        token_id=uuid4().hex,
        issued_at=now,
        expires_at=now + timedelta(minutes=minutes),
    )
