"""SQLAlchemy declarative Base and shared column helpers."""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def new_id() -> str:
    """Opaque primary key for every table."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)
