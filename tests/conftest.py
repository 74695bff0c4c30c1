"""Shared fixtures: SWT minting, stub authorities, and cache isolation."""

from __future__ import annotations

import base64
import hashlib
import hmac
import time
from typing import TYPE_CHECKING
from urllib.parse import quote_plus, urlencode

import pytest
import structlog

from oauthgate.authority import AuthorityProvider, ValidationAuthority, get_authority_provider
from oauthgate.logging import get_log_settings
from oauthgate.principal import Claim
from oauthgate.settings import get_auth_settings
from oauthgate.swt import SimpleWebTokenHandler
from oauthgate.validation import ClaimsValidated, RejectionReason, TokenRejected

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from oauthgate.validation import ValidationResult

SWT_KEY = b"orders-api-shared-signing-key-0123456789"
SWT_KEY_B64 = base64.b64encode(SWT_KEY).decode("ascii")
ISSUER = "https://issuer.example.com/"
AUDIENCE = "http://orders.example.com/"

_OAUTH_ENV_VARS = (
    "OAUTH_ISSUER",
    "OAUTH_AUDIENCE",
    "OAUTH_SWT_SIGNING_KEY",
    "OAUTH_JWT_SECRET",
    "OAUTH_JWKS_CACHE_TTL",
    "OAUTH_CLOCK_SKEW_SECONDS",
    "OAUTH_CONTROLLERS",
    "OAUTH_JWT_ISSUER",
    "OAUTH_LOG_LEVEL",
    "OAUTH_LOG_FORMAT",
)


def make_swt(
    claims: dict[str, str] | None = None,
    *,
    key: bytes = SWT_KEY,
    issuer: str | None = ISSUER,
    audience: str | None = AUDIENCE,
    expires_on: int | None = None,
) -> str:
    """Mint a signed Simple Web Token the way an issuer would."""
    pairs: dict[str, str] = dict(claims or {})
    if issuer is not None:
        pairs["Issuer"] = issuer
    if audience is not None:
        pairs["Audience"] = audience
    pairs["ExpiresOn"] = str(expires_on if expires_on is not None else int(time.time()) + 3600)
    unsigned = urlencode(pairs)
    signature = hmac.new(key, unsigned.encode("utf-8"), hashlib.sha256).digest()
    return f"{unsigned}&HMACSHA256={quote_plus(base64.b64encode(signature).decode('ascii'))}"


class StubTokenHandler:
    """Accepts one fixed token, rejects everything else."""

    token_type = "stub"

    def __init__(self, accepted: str = "good-token", claims: tuple[Claim, ...] = ()) -> None:
        self.accepted = accepted
        self.claims = claims or (
            Claim("name", "alice"),
            Claim("role", "admin"),
        )
        self.calls: list[str] = []

    def can_read_token(self, token: str) -> bool:
        return True

    def validate_token(self, token: str) -> ValidationResult:
        self.calls.append(token)
        if token == self.accepted:
            return ClaimsValidated(claims=self.claims, token_type=self.token_type)
        return TokenRejected(RejectionReason.INVALID_SIGNATURE, "stub rejection")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear OAUTH_* variables and cached singletons around every test."""
    for name in _OAUTH_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_auth_settings.cache_clear()
    get_authority_provider.cache_clear()
    get_log_settings.cache_clear()
    yield
    get_auth_settings.cache_clear()
    get_authority_provider.cache_clear()
    get_log_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture()
def mint_swt() -> Callable[..., str]:
    """Factory minting signed SWTs for the test issuer and audience."""
    return make_swt


@pytest.fixture()
def stub_handler() -> StubTokenHandler:
    """Handler accepting only ``good-token``, with name alice and role admin."""
    return StubTokenHandler()


@pytest.fixture()
def stub_provider(stub_handler: StubTokenHandler) -> AuthorityProvider:
    return AuthorityProvider(lambda: ValidationAuthority(handlers=[stub_handler]))


@pytest.fixture()
def swt_provider() -> AuthorityProvider:
    """Provider validating SWTs minted by ``mint_swt``."""
    handler = SimpleWebTokenHandler(SWT_KEY, issuer=ISSUER, audience=AUDIENCE)
    return AuthorityProvider(lambda: ValidationAuthority(handlers=[handler]))
