"""Error taxonomy shared by clients and wallet operations."""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """
    Base error carrying a stable code, a human message, a status and details.

    Every error raised on purpose by this package is a ServiceError, so
    callers that report failures softly catch this class and let anything
    else propagate.
    """

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details: dict[str, Any] = details if details is not None else {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error={self.error!r}, message={self.message!r}, "
            f"status_code={self.status_code})"
        )


class MissingIdentityError(ServiceError):
    """Raised when an operation needs a session identity and none is logged in."""

    def __init__(self, message: str = "No identity found. Please sign in.") -> None:
        super().__init__("MISSING_IDENTITY", message, 401, {})


class AccountValidationError(ServiceError):
    """Raised when an account argument is absent or of the wrong kind."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__("INVALID_ACCOUNT", message, 400, details)


class TransportError(ServiceError):
    """Any failure surfaced by an accounts or ledger client call."""
