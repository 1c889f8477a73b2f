"""SQLAlchemy ORM models."""

from guardroster.models.base import Base
from guardroster.models.message import Message
from guardroster.models.revoked_token import RevokedToken
from guardroster.models.shift import Shift
from guardroster.models.upload import Upload
from guardroster.models.user import User

__all__ = ["Base", "Message", "RevokedToken", "Shift", "Upload", "User"]
