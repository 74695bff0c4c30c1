"""Explicit validation outcomes and the token handler port.

Token handlers report their verdict as a value (``ClaimsValidated`` or
``TokenRejected``) instead of raising. The gateway is the only place that
turns a rejection into an exception.

Example:
    >>> result = handler.validate_token(raw)
    >>> if isinstance(result, TokenRejected):
    ...     print(result.reason)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable

from oauthgate.principal import Claim  # noqa: TC001 -- dataclass field type


class RejectionReason(StrEnum):
    """Why a credential was rejected. Internal only, never sent to clients."""

    MISSING_TOKEN = "missing_token"
    MALFORMED_TOKEN = "malformed_token"
    UNSUPPORTED_TOKEN = "unsupported_token"
    INVALID_SIGNATURE = "invalid_signature"
    TOKEN_EXPIRED = "token_expired"
    INVALID_ISSUER = "invalid_issuer"
    INVALID_AUDIENCE = "invalid_audience"
    INVALID_CLAIMS = "invalid_claims"
    AUTHORITY_ERROR = "authority_error"


@dataclass(frozen=True, slots=True)
class ClaimsValidated:
    """Successful validation.

    Attributes:
        claims: Claims carried by the token.
        token_type: Handler token type that accepted the token.
    """

    claims: tuple[Claim, ...]
    token_type: str


@dataclass(frozen=True, slots=True)
class TokenRejected:
    """Failed validation.

    Attributes:
        reason: Machine-readable rejection reason.
        detail: Human-readable explanation for logs.
    """

    reason: RejectionReason
    detail: str = ""


ValidationResult = ClaimsValidated | TokenRejected


@runtime_checkable
class TokenHandler(Protocol):
    """Port for a single token format.

    Implementations must not raise for ordinary validation failures;
    they return ``TokenRejected`` instead.
    """

    token_type: str

    def can_read_token(self, token: str) -> bool:
        """Return True if the raw token looks like this handler's format."""
        ...

    def validate_token(self, token: str) -> ValidationResult:
        """Validate the raw token and return the outcome."""
        ...
