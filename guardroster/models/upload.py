"""ORM model for uploaded file metadata. The bytes live in external object storage."""

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String, func
from sqlalchemy.orm import relationship

from guardroster.models.base import Base, new_id, utcnow

# Row is written before the blob; it becomes "stored" once the PUT succeeded.
UPLOAD_STATUS_PENDING = "pending"
UPLOAD_STATUS_STORED = "stored"


class Upload(Base):
    """
    Upload metadata. Rows in status "pending" have no confirmed blob yet and are
    hidden from listings; the maintenance job removes them after a grace period.
    """

    __tablename__ = "uploads"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    filename = Column(String(512), nullable=False)
    storage_key = Column(String(600), nullable=False, unique=True)
    storage_url = Column(String(2048), nullable=False)
    content_type = Column(String(255), nullable=True)
    size_bytes = Column(BigInteger, nullable=False, default=0)
    status = Column(
        String(16), nullable=False, default=UPLOAD_STATUS_PENDING, index=True
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    user = relationship("User", lazy="joined")
