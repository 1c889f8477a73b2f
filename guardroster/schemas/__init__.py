"""Pydantic request/response schemas."""

from guardroster.schemas.auth import LoginRequest, LogoutResponse, SessionInfo, TokenResponse
from guardroster.schemas.error import ErrorResponse
from guardroster.schemas.health import HealthResponse
from guardroster.schemas.message import MessageCreate, MessageRead
from guardroster.schemas.shift import ShiftCreate, ShiftRead
from guardroster.schemas.upload import UploadRead
from guardroster.schemas.user import UserCreate, UserRead, UserUpdate

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LogoutResponse",
    "MessageCreate",
    "MessageRead",
    "SessionInfo",
    "ShiftCreate",
    "ShiftRead",
    "TokenResponse",
    "UploadRead",
    "UserCreate",
    "UserRead",
    "UserUpdate",
]
