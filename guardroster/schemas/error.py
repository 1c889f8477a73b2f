"""Error body returned for every failed request."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Stable error kind, e.g. invalid_input or forbidden")
    detail: str = Field(..., description="Human-readable message")
    fields: list[str] = Field(default_factory=list, description="Offending fields for invalid_input")
