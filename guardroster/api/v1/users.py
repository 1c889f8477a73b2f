"""Staff account endpoints (admin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from guardroster.api.v1.auth import CurrentSession
from guardroster.core.database import get_db
from guardroster.schemas.error import ErrorResponse
from guardroster.schemas.user import UserCreate, UserRead, UserUpdate
from guardroster.services.users import UserManager

router = APIRouter(
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
    }
)


def get_user_manager(db: Annotated[Session, Depends(get_db)]) -> UserManager:
    return UserManager(db)


Users = Annotated[UserManager, Depends(get_user_manager)]


@router.get("", response_model=list[UserRead])
def list_users(session: CurrentSession, users: Users) -> list[UserRead]:
    """List all accounts (id, name, email, role)."""
    return [UserRead.model_validate(u) for u in users.list(session)]


@router.post(
    "",
    response_model=UserRead,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_user(body: UserCreate, session: CurrentSession, users: Users) -> UserRead:
    """Create an account. The password is hashed and never returned."""
    return UserRead.model_validate(users.create(session, body))


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_user(
    user_id: str, body: UserUpdate, session: CurrentSession, users: Users
) -> UserRead:
    """Change an account's role and/or password."""
    return UserRead.model_validate(users.update(session, user_id, body))


@router.delete(
    "/{user_id}",
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def delete_user(user_id: str, session: CurrentSession, users: Users) -> dict[str, str]:
    """Delete an account that no longer owns shifts, messages or uploads."""
    users.delete(session, user_id)
    return {"message": "User deleted."}
