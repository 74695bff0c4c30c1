"""Exception hierarchy for authentication failures.

Exceptions carry a machine-readable error code and structured context for
logging. ``ValidationRejected`` is the single failure surface of the
validation gateway; the specific ``RejectionReason`` it carries is for
telemetry and is never returned to clients.

Example:
    >>> from oauthgate.exceptions import ValidationRejected
    >>> from oauthgate.validation import RejectionReason
    >>> raise ValidationRejected(RejectionReason.TOKEN_EXPIRED)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from oauthgate.validation import RejectionReason

__all__ = [
    "AuthError",
    "AuthenticationError",
    "AuthorityInitializationError",
    "ValidationRejected",
]


class AuthError(Exception):
    """Base class for all authentication errors.

    Attributes:
        error_code: Machine-readable error code for client handling.
        message: Human-readable error description.
        context: Structured debugging information.
    """

    error_code: str = "AUTH_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation including context for logging."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ValidationRejected(AuthError):
    """Raised by the validation gateway when a credential is not accepted.

    Covers every failure: absent credential, malformed or expired token,
    signature mismatch, unknown issuer, and errors raised inside the
    authority itself.

    Attributes:
        reason: Internal rejection reason.
        detail: Internal explanation for logs.
    """

    error_code: str = "VALIDATION_REJECTED"

    def __init__(self, reason: RejectionReason, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__("Credential rejected", context={"reason": str(reason)})


class AuthorityInitializationError(AuthError):
    """Raised when the validation authority cannot be constructed or initialized.

    Not a rejection: the current call fails as a server error and the next
    call re-attempts initialization.
    """

    error_code: str = "AUTHORITY_INITIALIZATION_ERROR"


class AuthenticationError(AuthError):
    """Raised when a handler requires a principal but none is attached.

    Maps to HTTP 401 Unauthorized with the redirect suppression marker.
    """

    error_code: str = "NOT_AUTHENTICATED"
