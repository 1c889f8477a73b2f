"""ORM model for work shifts assigned to staff."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, func
from sqlalchemy.orm import relationship

from guardroster.models.base import Base, new_id, utcnow


class Shift(Base):
    """One assigned shift. start_time is always before end_time."""

    __tablename__ = "shifts"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_shifts_time_range"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    user = relationship("User", lazy="joined")
