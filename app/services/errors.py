"""
Service-level exceptions shared by the gate, the policy and the workflows.

Each error carries the HTTP status it maps to, a machine-readable code and a
human-readable message. The API layer renders them; nothing here imports
FastAPI.
"""


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class AuthenticationError(ServiceError):
    """Missing, malformed, tampered or expired bearer token (401)."""

    status_code = 401
    code = "invalid_token"

    def __init__(self, message: str, code: str = "invalid_token", challenge: str = "invalid_token") -> None:
        super().__init__(message, code)
        self.challenge = challenge

    @property
    def headers(self) -> dict[str, str]:
        return {
            "WWW-Authenticate": (
                f'Bearer realm="vetted", error="{self.challenge}", '
                f'error_description="{self.message}"'
            )
        }


class AuthorizationError(ServiceError):
    """Caller is authenticated but not allowed (403). Never says which role would work."""

    status_code = 403
    code = "forbidden"

    def __init__(self) -> None:
        super().__init__("Access denied")


class InputValidationError(ServiceError):
    """Request violates a business rule (400); code names the rule."""

    status_code = 400
    code = "invalid_request"


class NotFoundError(ServiceError):
    status_code = 404
    code = "content_not_found"


class ConflictError(ServiceError):
    """Concurrent modification or a transition the workflow refuses (409)."""

    status_code = 409
    code = "conflict"


class PersistenceError(ServiceError):
    """Store failure. Detail is logged, never returned."""

    status_code = 500
    code = "internal_error"

    def __init__(self) -> None:
        super().__init__("Internal server error")
