"""Shift endpoints: admins assign and remove, staff read their own."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from guardroster.api.v1.auth import CurrentSession
from guardroster.core.database import get_db
from guardroster.models import Shift
from guardroster.schemas.error import ErrorResponse
from guardroster.schemas.shift import ShiftCreate, ShiftRead
from guardroster.services.shifts import ShiftManager

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    }
)


def get_shift_manager(db: Annotated[Session, Depends(get_db)]) -> ShiftManager:
    return ShiftManager(db)


Shifts = Annotated[ShiftManager, Depends(get_shift_manager)]


def _to_read(shift: Shift) -> ShiftRead:
    return ShiftRead(
        id=shift.id,
        user_id=shift.user_id,
        user_name=shift.user.name if shift.user is not None else None,
        start_time=shift.start_time,
        end_time=shift.end_time,
        location=shift.location,
    )


@router.get("", response_model=list[ShiftRead])
def list_shifts(
    session: CurrentSession,
    shifts: Shifts,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> list[ShiftRead]:
    """
    Admins: all shifts, or one user's with ?userId=. Staff: their own shifts;
    passing another user's id is rejected with 403.
    """
    return [_to_read(s) for s in shifts.list(session, user_id)]


@router.post("", response_model=ShiftRead, responses={400: {"model": ErrorResponse}})
def create_shift(body: ShiftCreate, session: CurrentSession, shifts: Shifts) -> ShiftRead:
    """Assign a shift. startTime must be before endTime and userId must exist."""
    return _to_read(shifts.create(session, body))


@router.delete("/{shift_id}", responses={404: {"model": ErrorResponse}})
def delete_shift(shift_id: str, session: CurrentSession, shifts: Shifts) -> dict[str, str]:
    shifts.delete(session, shift_id)
    return {"message": "Shift deleted."}
