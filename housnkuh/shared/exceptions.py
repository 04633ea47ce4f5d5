"""Domain error kinds raised by the core services.

The API layer maps each kind to a status code in ``main.py``; services never
raise ``HTTPException`` themselves so they stay callable from jobs and the
migration runner.
"""

from typing import Any, Optional


class DomainError(Exception):
    """Base class for errors the caller can act on"""

    status_code = 400
    error_code = "domain_error"

    def __init__(self, detail: str, context: Optional[dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.detail, "error": self.error_code}
        if self.context:
            payload["context"] = self.context
        return payload


class ValidationError(DomainError):
    """Malformed or missing input fields"""

    status_code = 400
    error_code = "validation_error"


class ConflictError(DomainError):
    """Duplicate email, or a rental unit that is already booked"""

    status_code = 409
    error_code = "conflict"


class NotFoundError(DomainError):
    status_code = 404
    error_code = "not_found"


class StateError(DomainError):
    """Transition not permitted from the current status"""

    status_code = 409
    error_code = "invalid_state"


class AuthenticationError(DomainError):
    """Unknown account or wrong password"""

    status_code = 401
    error_code = "authentication_failed"


class PermissionDeniedError(DomainError):
    status_code = 403
    error_code = "forbidden"
