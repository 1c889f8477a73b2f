"""Typed service errors shared by the managers and mapped to status codes by the API."""


class ServiceError(Exception):
    """Base class for failures returned to the API boundary."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, fields: list[str] | None = None) -> None:
        self.message = message
        self.fields = list(fields or [])
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        body: dict[str, object] = {"error": self.code, "detail": self.message}
        if self.fields:
            body["fields"] = self.fields
        return body


class Unauthenticated(ServiceError):
    """No, malformed, expired or revoked session."""

    status_code = 401
    code = "unauthenticated"


class InvalidCredentials(Unauthenticated):
    """Login failed. The message never reveals whether the email exists."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password.")


class Forbidden(ServiceError):
    """Valid session, but the role or ownership does not permit the operation."""

    status_code = 403
    code = "forbidden"


class InvalidInput(ServiceError):
    """Missing or malformed fields; `fields` names the offending ones."""

    status_code = 400
    code = "invalid_input"


class Conflict(ServiceError):
    status_code = 409
    code = "conflict"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class DependencyFailure(ServiceError):
    """Database or object-storage call failed; surfaced as-is, never retried."""

    status_code = 500
    code = "dependency_failure"
