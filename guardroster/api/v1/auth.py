"""Login, logout and the session dependency used by every protected route."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from guardroster.core.config import get_settings
from guardroster.core.database import get_db
from guardroster.schemas.auth import LoginRequest, LogoutResponse, SessionInfo, TokenResponse
from guardroster.schemas.error import ErrorResponse
from guardroster.services.sessions import AuthSession, SessionAuthenticator

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_authenticator(db: Annotated[Session, Depends(get_db)]) -> SessionAuthenticator:
    return SessionAuthenticator(db, get_settings())


def get_current_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> AuthSession:
    """Dependency: resolve the Bearer token into a session. Raises Unauthenticated (401)."""
    token = credentials.credentials if credentials is not None else None
    return authenticator.validate(token)


CurrentSession = Annotated[AuthSession, Depends(get_current_session)]


@router.post(
    "",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
)
def login(
    body: LoginRequest,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a session token.
    Include the token in the Authorization header as: Bearer <accessToken>
    """
    session, token = authenticator.authenticate(body.email, body.password)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_at=session.expires_at,
        user_id=session.principal_id,
        role=session.role,
    )


@router.post("/logout", response_model=LogoutResponse)
def logout(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> LogoutResponse:
    """Revoke the caller's session. Always succeeds; an expired or unknown token is already unusable."""
    authenticator.terminate(credentials.credentials if credentials is not None else None)
    return LogoutResponse()


@router.get("/me", response_model=SessionInfo, responses={401: {"model": ErrorResponse}})
def read_session(session: CurrentSession) -> SessionInfo:
    return SessionInfo(
        user_id=session.principal_id,
        role=session.role,
        issued_at=session.issued_at,
        expires_at=session.expires_at,
    )
