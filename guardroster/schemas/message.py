"""Request/response schemas for messages."""

from datetime import datetime

from pydantic import Field

from guardroster.schemas.base import ApiModel

MESSAGE_MAX_LEN = 10_000


class MessageCreate(ApiModel):
    """content is checked for emptiness after trimming by the manager."""

    content: str = Field(..., max_length=MESSAGE_MAX_LEN)
    user_id: str | None = Field(default=None, max_length=36)


class MessageRead(ApiModel):
    id: str
    user_id: str
    user_name: str | None = None
    content: str
    created_at: datetime
