"""Simple Web Token (SWT) parsing and validation.

An SWT is a form-urlencoded list of claim pairs whose last pair is
``HMACSHA256=<base64 signature>``. The signature is HMAC-SHA256 over the
raw bytes preceding ``&HMACSHA256=``. Reserved pairs:

- ``Issuer``: token issuer
- ``Audience``: intended audience
- ``ExpiresOn``: expiry as integer seconds since the Unix epoch

Every other pair is a claim. A comma-separated value is a multi-valued claim.

Example:
    >>> handler = SimpleWebTokenHandler(signing_key=key, issuer="https://issuer")
    >>> result = handler.validate_token(raw)
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, unquote_plus

from oauthgate.logging import get_logger
from oauthgate.principal import Claim
from oauthgate.validation import ClaimsValidated, RejectionReason, TokenRejected

if TYPE_CHECKING:
    from collections.abc import Callable

    from oauthgate.validation import ValidationResult

logger = get_logger(__name__)

SIGNATURE_KEY = "HMACSHA256"
ISSUER_KEY = "Issuer"
AUDIENCE_KEY = "Audience"
EXPIRES_ON_KEY = "ExpiresOn"

_SIGNATURE_SEPARATOR = f"&{SIGNATURE_KEY}="
_RESERVED_KEYS = frozenset({ISSUER_KEY, AUDIENCE_KEY, EXPIRES_ON_KEY, SIGNATURE_KEY})


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class SimpleWebToken:
    """Parsed, not yet verified, Simple Web Token.

    Attributes:
        unsigned: Raw text covered by the signature.
        signature: Decoded HMAC-SHA256 signature bytes.
        values: Claim pairs in token order, reserved pairs excluded.
        issuer: ``Issuer`` value, or None.
        audience: ``Audience`` value, or None.
        expires_on: ``ExpiresOn`` as an aware UTC datetime, or None.
    """

    unsigned: str
    signature: bytes = field(repr=False)
    values: tuple[tuple[str, str], ...] = ()
    issuer: str | None = None
    audience: str | None = None
    expires_on: datetime | None = None

    @classmethod
    def parse(cls, raw: str) -> SimpleWebToken:
        """Parse a raw SWT string.

        Args:
            raw: Token text as sent in the Authorization header.

        Returns:
            Parsed token.

        Raises:
            ValueError: If the token is unsigned, not form-encoded, or has
                a non-integer ``ExpiresOn``.
        """
        unsigned, separator, encoded_signature = raw.rpartition(_SIGNATURE_SEPARATOR)
        if not separator or not unsigned or not encoded_signature:
            raise ValueError("SWT is missing the HMACSHA256 signature")
        if "&" in encoded_signature:
            raise ValueError("HMACSHA256 must be the last pair of an SWT")

        try:
            pairs = parse_qsl(unsigned, keep_blank_values=True, strict_parsing=True)
            signature = base64.b64decode(unquote_plus(encoded_signature), validate=True)
        except (ValueError, binascii.Error) as exc:
            raise ValueError("SWT is not a valid form-encoded token") from exc

        issuer = audience = None
        expires_on = None
        values: list[tuple[str, str]] = []
        for key, value in pairs:
            if key == ISSUER_KEY:
                issuer = value
            elif key == AUDIENCE_KEY:
                audience = value
            elif key == EXPIRES_ON_KEY:
                try:
                    expires_on = datetime.fromtimestamp(int(value), tz=UTC)
                except (ValueError, OverflowError, OSError) as exc:
                    raise ValueError("SWT ExpiresOn must be an integer timestamp") from exc
            elif key not in _RESERVED_KEYS:
                values.append((key, value))

        return cls(
            unsigned=unsigned,
            signature=signature,
            values=tuple(values),
            issuer=issuer,
            audience=audience,
            expires_on=expires_on,
        )

    def verify_signature(self, key: bytes) -> bool:
        """Check the HMAC-SHA256 signature in constant time."""
        expected = hmac.new(key, self.unsigned.encode("utf-8"), hashlib.sha256).digest()
        return hmac.compare_digest(expected, self.signature)

    def is_expired(self, now: datetime, skew: timedelta = timedelta(0)) -> bool:
        """Return True if the token has no expiry or has expired at ``now``."""
        if self.expires_on is None:
            return True
        return now >= self.expires_on + skew

    def claims(self) -> tuple[Claim, ...]:
        """Expand claim pairs, splitting comma-separated multi-values."""
        claims: list[Claim] = []
        for key, value in self.values:
            for item in value.split(","):
                stripped = item.strip()
                if stripped:
                    claims.append(Claim(type=key, value=stripped, issuer=self.issuer))
        return tuple(claims)


class SimpleWebTokenHandler:
    """Token handler for HMAC-SHA256 signed Simple Web Tokens.

    Args:
        signing_key: Symmetric key shared with the token issuer.
        issuer: Required ``Issuer`` value. Empty string skips the check.
        audience: Required ``Audience`` value. Empty string skips the check.
        clock_skew: Tolerance applied to ``ExpiresOn``.
        clock: Current-time source, injectable for tests.

    Raises:
        ValueError: If signing_key is empty.
    """

    token_type = "swt"

    def __init__(
        self,
        signing_key: bytes,
        *,
        issuer: str = "",
        audience: str = "",
        clock_skew: timedelta = timedelta(0),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not signing_key:
            raise ValueError("SWT signing key is required")
        self._signing_key = signing_key
        self._issuer = issuer
        self._audience = audience
        self._clock_skew = clock_skew
        self._clock = clock

    def can_read_token(self, token: str) -> bool:
        return token.startswith(f"{SIGNATURE_KEY}=") or _SIGNATURE_SEPARATOR in token

    def validate_token(self, token: str) -> ValidationResult:
        try:
            swt = SimpleWebToken.parse(token)
        except ValueError as exc:
            return TokenRejected(RejectionReason.MALFORMED_TOKEN, str(exc))

        if not swt.verify_signature(self._signing_key):
            return TokenRejected(RejectionReason.INVALID_SIGNATURE, "SWT signature mismatch")

        if swt.is_expired(self._clock(), self._clock_skew):
            return TokenRejected(RejectionReason.TOKEN_EXPIRED, "SWT has expired")

        if self._issuer and swt.issuer != self._issuer:
            return TokenRejected(
                RejectionReason.INVALID_ISSUER, f"Unexpected issuer {swt.issuer!r}"
            )

        if self._audience and swt.audience != self._audience:
            return TokenRejected(
                RejectionReason.INVALID_AUDIENCE, f"Unexpected audience {swt.audience!r}"
            )

        logger.debug("swt_validated", issuer=swt.issuer, claim_count=len(swt.values))
        return ClaimsValidated(claims=swt.claims(), token_type=self.token_type)
