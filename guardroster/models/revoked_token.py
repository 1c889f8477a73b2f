"""ORM model for revoked session tokens (logout)."""

from sqlalchemy import Column, DateTime, String, func

from guardroster.models.base import Base, utcnow


class RevokedToken(Base):
    """
    Token id (jti) of a terminated session. Kept until the token's own expiry,
    after which the signature check rejects it anyway and the row can be purged.
    """

    __tablename__ = "revoked_tokens"

    token_id = Column(String(64), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    revoked_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
