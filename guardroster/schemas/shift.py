"""Request/response schemas for shifts."""

from datetime import UTC, datetime

from pydantic import Field, field_validator

from guardroster.schemas.base import ApiModel


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC so start/end always compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ShiftCreate(ApiModel):
    user_id: str = Field(..., min_length=1, max_length=36)
    start_time: datetime
    end_time: datetime
    location: str = Field(..., min_length=1, max_length=255)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v: datetime) -> datetime:
        return as_utc(v)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("location must be non-empty")
        return v.strip()


class ShiftRead(ApiModel):
    id: str
    user_id: str
    user_name: str | None = None
    start_time: datetime
    end_time: datetime
    location: str
