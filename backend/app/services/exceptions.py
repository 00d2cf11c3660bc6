"""
Custom exceptions for the service layer.

Each error carries a ``kind`` and a human-readable message; the API layer
translates them into HTTP responses (see ``app.main``).
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class NotFoundError(ServiceError):
    """Raised when a referenced event, ledger row or user does not exist."""

    kind = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier
        if identifier is None:
            message = f"{resource} not found"
        else:
            message = f"{resource} {identifier} not found"
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Raised when the caller lacks ownership or role."""

    kind = "forbidden"
    status_code = 403


class ConflictError(ServiceError):
    """Raised when a request is incompatible with current state."""

    kind = "conflict"
    status_code = 409


class InvalidArgumentError(ServiceError):
    """Raised for malformed input or ids that do not resolve."""

    kind = "invalid_argument"
    status_code = 400

    def __init__(self, message: str, invalid_ids: Optional[list[str]] = None):
        self.invalid_ids = invalid_ids or []
        super().__init__(message)

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.invalid_ids:
            body["invalid_ids"] = self.invalid_ids
        return body


class InvalidStateError(ServiceError):
    """Raised when an operation is attempted outside its valid time window."""

    kind = "invalid_state"
    status_code = 400


class UnauthenticatedError(ServiceError):
    """Raised when a request carries no resolvable caller identity."""

    kind = "unauthenticated"
    status_code = 401
