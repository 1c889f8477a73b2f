"""ORM model for staff accounts (principals)."""

from sqlalchemy import Column, DateTime, Enum, String, func

from guardroster.core.roles import Role
from guardroster.models.base import Base, new_id, utcnow


class User(Base):
    """
    Staff account for session authentication and role-based access control.

    email is stored lower-cased and is unique. password_hash never leaves the service layer.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(Role, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=Role.USER,
    )
    # Sessions issued before this instant stop validating.
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
