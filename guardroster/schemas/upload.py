"""Response schemas for uploaded files."""

from datetime import datetime

from guardroster.schemas.base import ApiModel


class UploadRead(ApiModel):
    id: str
    user_id: str
    user_name: str | None = None
    filename: str
    url: str
    content_type: str | None = None
    size_bytes: int
    created_at: datetime
