"""Messages from staff to the admin inbox. Created once, never changed."""

import logging

from sqlalchemy.orm import Session

from guardroster.core.errors import InvalidInput
from guardroster.models import Message, User
from guardroster.schemas.message import MessageCreate
from guardroster.services.policy import Operation, ResourceType, enforce
from guardroster.services.sessions import AuthSession
from guardroster.services.store import store_call

logger = logging.getLogger(__name__)


class MessageManager:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, session: AuthSession, payload: MessageCreate) -> Message:
        """Author defaults to the caller; only admins may name another author."""
        content = payload.content.strip()
        if not content:
            raise InvalidInput("Message content is required.", fields=["content"])
        author_id = payload.user_id or session.principal_id
        enforce(session.principal, Operation.CREATE, ResourceType.MESSAGE, author_id)

        if author_id != session.principal_id:
            with store_call(self.db, "look up user"):
                author = self.db.get(User, author_id)
            if author is None:
                raise InvalidInput("Referenced user does not exist.", fields=["userId"])

        message = Message(user_id=author_id, content=content)
        with store_call(self.db, "create message", commit=True, refresh=message):
            self.db.add(message)
        logger.info(
            "Message created",
            extra={"message_id": message.id, "user_id": author_id, "length": len(content)},
        )
        return message

    def list(self, session: AuthSession, user_id: str | None = None) -> list[Message]:
        """Admin inbox (optionally one author), or the caller's own sent messages. Newest first."""
        if session.is_admin:
            enforce(session.principal, Operation.READ, ResourceType.MESSAGE, user_id)
            author_filter = user_id
        else:
            author_filter = user_id or session.principal_id
            enforce(session.principal, Operation.READ, ResourceType.MESSAGE, author_filter)

        with store_call(self.db, "list messages"):
            query = self.db.query(Message)
            if author_filter is not None:
                query = query.filter(Message.user_id == author_filter)
            return query.order_by(Message.created_at.desc(), Message.id).all()
