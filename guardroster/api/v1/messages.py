"""Message endpoints: anyone signed in can write; admins read the inbox."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guardroster.api.v1.auth import CurrentSession
from guardroster.core.database import get_db
from guardroster.models import Message
from guardroster.schemas.error import ErrorResponse
from guardroster.schemas.message import MessageCreate, MessageRead
from guardroster.services.messages import MessageManager

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    }
)


def get_message_manager(db: Annotated[Session, Depends(get_db)]) -> MessageManager:
    return MessageManager(db)


Messages = Annotated[MessageManager, Depends(get_message_manager)]


def _to_read(message: Message) -> MessageRead:
    return MessageRead(
        id=message.id,
        user_id=message.user_id,
        user_name=message.user.name if message.user is not None else None,
        content=message.content,
        created_at=message.created_at,
    )


@router.post("", response_model=MessageRead, responses={400: {"model": ErrorResponse}})
def create_message(
    body: MessageCreate, session: CurrentSession, messages: Messages
) -> MessageRead:
    """Send a message. userId defaults to the caller; only admins may set another author."""
    return _to_read(messages.create(session, body))


@router.get("", response_model=list[MessageRead])
def list_messages(
    session: CurrentSession,
    messages: Messages,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> list[MessageRead]:
    """Admins: the inbox (optionally one author). Staff: messages they sent."""
    return [_to_read(m) for m in messages.list(session, user_id)]
