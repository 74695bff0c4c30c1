"""Credential extraction from the Authorization header.

Recognizes exactly one scheme, ``OAuth``, compared case-sensitively.
Anything else (no header, several headers, an unparseable value, another
scheme, an empty parameter) yields no credential. That is a routing signal,
not an error: the gateway rejects a missing credential through the same
path as an invalid one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from starlette.datastructures import Headers
    from starlette.requests import HTTPConnection

OAUTH_SCHEME = "OAuth"
AUTHORIZATION_HEADER = "Authorization"


@dataclass(frozen=True, slots=True)
class Credential:
    """Scheme-tagged opaque token taken from the Authorization header.

    Attributes:
        scheme: Authentication scheme the token was presented with.
        token: Raw token string. Opaque to everything but the authority.
    """

    scheme: str
    token: str

    def __repr__(self) -> str:
        # Never expose the raw token in reprs or logs.
        return f"Credential(scheme={self.scheme!r}, token=<{len(self.token)} chars>)"


def parse_authorization_header(value: str) -> tuple[str, str] | None:
    """Split an Authorization header value into (scheme, parameter).

    Args:
        value: Raw header value, e.g. ``"OAuth abc=1&HMACSHA256=..."``.

    Returns:
        ``(scheme, parameter)`` with surrounding whitespace removed, or None
        when the value has no scheme or no parameter.
    """
    parts = value.strip().split(None, 1)
    if len(parts) != 2:
        return None
    scheme, parameter = parts[0], parts[1].strip()
    if not parameter:
        return None
    return scheme, parameter


def extract_credential(
    source: HTTPConnection | Headers,
    scheme: str = OAUTH_SCHEME,
) -> Credential | None:
    """Extract the credential from a request's Authorization header.

    Args:
        source: Request (or any HTTP connection) or its headers.
        scheme: Recognized scheme name. Matched with exact case.

    Returns:
        Credential for the recognized scheme, or None.
    """
    headers = getattr(source, "headers", source)
    values = headers.getlist(AUTHORIZATION_HEADER)
    if len(values) != 1:
        return None

    parsed = parse_authorization_header(values[0])
    if parsed is None:
        return None

    header_scheme, parameter = parsed
    if header_scheme != scheme:
        return None
    return Credential(scheme=header_scheme, token=parameter)
