"""
Coarse path-prefix gate applied before any router runs.

Only checks the token signature, expiry and role claim; revocation and the
per-operation policy are checked again behind it by the routers and managers.
"""

import logging
from collections.abc import Sequence

import jwt
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from guardroster.core.errors import Forbidden, ServiceError, Unauthenticated
from guardroster.core.roles import Role
from guardroster.core.security import decode_access_token

logger = logging.getLogger(__name__)


def _matches(path: str, prefixes: Sequence[str]) -> bool:
    return any(path == p or path.startswith(p.rstrip("/") + "/") for p in prefixes)


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def check_route(
    path: str,
    token: str | None,
    *,
    admin_prefixes: Sequence[str],
    authenticated_prefixes: Sequence[str],
) -> ServiceError | None:
    """Return the error to answer with, or None to let the request through."""
    needs_admin = _matches(path, admin_prefixes)
    if not needs_admin and not _matches(path, authenticated_prefixes):
        return None
    if token is None:
        return Unauthenticated("Not authenticated")
    try:
        claims = decode_access_token(token)
    except jwt.PyJWTError:
        return Unauthenticated("Invalid or expired token")
    if needs_admin and claims.get("role") != Role.ADMIN.value:
        return Forbidden("Admin access required")
    return None


class RouteGuardMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        *,
        admin_prefixes: Sequence[str],
        authenticated_prefixes: Sequence[str],
    ) -> None:
        super().__init__(app)
        self.admin_prefixes = tuple(admin_prefixes)
        self.authenticated_prefixes = tuple(authenticated_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return await call_next(request)
        error = check_route(
            request.url.path,
            bearer_token(request.headers.get("authorization")),
            admin_prefixes=self.admin_prefixes,
            authenticated_prefixes=self.authenticated_prefixes,
        )
        if error is None:
            return await call_next(request)
        logger.info(
            "Route guard rejected request",
            extra={"path": request.url.path, "status_code": error.status_code},
        )
        headers = {"WWW-Authenticate": "Bearer"} if error.status_code == status.HTTP_401_UNAUTHORIZED else None
        return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)
