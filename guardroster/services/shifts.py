"""Shift lifecycle: admins assign and remove shifts, staff read their own."""

import logging

from sqlalchemy.orm import Session

from guardroster.core.errors import InvalidInput, NotFound
from guardroster.models import Shift, User
from guardroster.schemas.shift import ShiftCreate
from guardroster.services.policy import Operation, ResourceType, enforce
from guardroster.services.sessions import AuthSession
from guardroster.services.store import store_call

logger = logging.getLogger(__name__)


def validate_time_range(payload: ShiftCreate) -> None:
    if payload.start_time >= payload.end_time:
        raise InvalidInput("startTime must be before endTime.", fields=["startTime", "endTime"])


class ShiftManager:
    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, session: AuthSession, payload: ShiftCreate) -> Shift:
        """Assign a shift to an existing user (admin only)."""
        validate_time_range(payload)
        enforce(session.principal, Operation.CREATE, ResourceType.SHIFT, payload.user_id)
        with store_call(self.db, "look up user"):
            owner = self.db.get(User, payload.user_id)
        if owner is None:
            raise InvalidInput("Referenced user does not exist.", fields=["userId"])

        shift = Shift(
            user_id=payload.user_id,
            start_time=payload.start_time,
            end_time=payload.end_time,
            location=payload.location,
        )
        with store_call(self.db, "create shift", commit=True, refresh=shift):
            self.db.add(shift)
        logger.info("Shift created", extra={"shift_id": shift.id, "user_id": shift.user_id})
        return shift

    def delete(self, session: AuthSession, shift_id: str) -> None:
        enforce(session.principal, Operation.DELETE, ResourceType.SHIFT)
        with store_call(self.db, "look up shift"):
            shift = self.db.get(Shift, shift_id)
        if shift is None:
            raise NotFound("Shift not found.")
        with store_call(self.db, "delete shift", commit=True):
            self.db.delete(shift)
        logger.info("Shift deleted", extra={"shift_id": shift_id})

    def list(self, session: AuthSession, user_id: str | None = None) -> list[Shift]:
        """
        Admins see every shift, or one user's when user_id is given. Staff see only
        their own; asking for someone else's is Forbidden rather than an empty list.
        """
        if session.is_admin:
            enforce(session.principal, Operation.READ, ResourceType.SHIFT, user_id)
            owner_filter = user_id
        else:
            owner_filter = user_id or session.principal_id
            enforce(session.principal, Operation.READ, ResourceType.SHIFT, owner_filter)

        with store_call(self.db, "list shifts"):
            query = self.db.query(Shift)
            if owner_filter is not None:
                query = query.filter(Shift.user_id == owner_filter)
            return query.order_by(Shift.start_time, Shift.id).all()
