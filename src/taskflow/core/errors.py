"""Typed failures raised by the identity core.

Each error carries the machine-readable ``code`` returned to API clients
and the HTTP status the API layer maps it to. Messages are for server-side
logs only; responses expose the code (plus ``extra``) and nothing else.
"""

from typing import Any


class IdentityError(Exception):
    """Base class for all identity and account failures.

    Attributes:
        code: Error code rendered as ``{"error": code}``
        status_code: HTTP status code for the response
        extra: Additional response fields (for example the current role)
    """

    code = "identity_error"
    status_code = 400

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.code
        self.extra = extra
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        return {"error": self.code, **self.extra}


class InvalidPayloadError(IdentityError):
    """Login assertion is malformed or lacks required fields."""

    code = "bad_payload"
    status_code = 400


class InvalidSignatureError(IdentityError):
    code = "invalid_signature"
    status_code = 401


class AssertionExpiredError(IdentityError):
    """Login assertion is older than the freshness window."""

    code = "auth_too_old"
    status_code = 401


class UnauthorizedError(IdentityError):
    code = "unauthorized"
    status_code = 401


class AccountNotFoundError(IdentityError):
    code = "not_found"
    status_code = 404


class InvalidIdentifierError(IdentityError):
    """Public identifier matches neither the external nor the internal encoding."""

    code = "bad_user_id"
    status_code = 400


class InvalidRoleError(IdentityError):
    code = "invalid_role"
    status_code = 400


class RoleConflictError(IdentityError):
    """Role was already decided differently; ``role`` reports the stored value."""

    code = "role_already_set"
    status_code = 409

    def __init__(self, current_role: str, message: str | None = None):
        self.current_role = current_role
        super().__init__(message or f"role already set to {current_role}", role=current_role)


class StorageUnavailableError(IdentityError):
    code = "storage_unavailable"
    status_code = 503


class NotConfiguredError(IdentityError):
    """A required secret is missing. Operator error, not a client error."""

    code = "server_not_configured"
    status_code = 500
