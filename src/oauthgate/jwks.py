"""Signing keys published by an OIDC issuer, for RS256 JWT validation.

``IssuerKeySet`` does no I/O when constructed, so building the validation
authority never touches the network. The first key lookup resolves the
issuer's ``jwks_uri`` from ``{issuer}/.well-known/openid-configuration``
(falling back to ``{issuer}/.well-known/jwks.json``) and builds a
``PyJWKClient`` over it. Resolution happens once, under a lock. After that,
PyJWKClient caches the key set for ``cache_ttl`` seconds and refetches it
when a token names an unknown ``kid``.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import httpx
from jwt import PyJWKClient

from oauthgate.logging import get_logger

if TYPE_CHECKING:
    from jwt import PyJWK

logger = get_logger(__name__)

_DISCOVERY_TIMEOUT_SECONDS = 5.0


class IssuerKeySet:
    """Lazily located JWKS of one issuer.

    Args:
        issuer: OIDC issuer base URL.
        cache_ttl: Seconds PyJWKClient keeps the fetched key set.
        http_client: Client used for the discovery request. A short-lived
            client is opened per discovery when omitted.

    Raises:
        ValueError: If issuer is empty.
    """

    def __init__(
        self,
        issuer: str,
        *,
        cache_ttl: int = 300,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not issuer:
            raise ValueError("An issuer URL is required to locate JWT signing keys")
        self._issuer = issuer.rstrip("/")
        self._cache_ttl = cache_ttl
        self._http_client = http_client
        self._lock = threading.Lock()
        self._jwks_uri: str | None = None
        self._jwk_client: PyJWKClient | None = None

    @property
    def issuer(self) -> str:
        return self._issuer

    @property
    def jwks_uri(self) -> str | None:
        """Resolved key set URL, or None before the first lookup."""
        return self._jwks_uri

    def get_signing_key_from_jwt(self, token: str) -> PyJWK:
        """Return the key matching the token's ``kid``.

        Raises:
            PyJWKClientError: If no key matches after a refresh.
            PyJWKClientConnectionError: If the key set cannot be fetched.
        """
        return self._client().get_signing_key_from_jwt(token)

    def _client(self) -> PyJWKClient:
        client = self._jwk_client
        if client is not None:
            return client

        with self._lock:
            if self._jwk_client is None:
                jwks_uri = self._discover_jwks_uri() or f"{self._issuer}/.well-known/jwks.json"
                self._jwk_client = PyJWKClient(
                    jwks_uri,
                    cache_jwk_set=True,
                    lifespan=self._cache_ttl,
                )
                self._jwks_uri = jwks_uri
                logger.info(
                    "issuer_keys_located",
                    issuer=self._issuer,
                    jwks_uri=jwks_uri,
                    cache_ttl=self._cache_ttl,
                )
            return self._jwk_client

    def _fetch(self, url: str) -> httpx.Response:
        if self._http_client is not None:
            return self._http_client.get(url)
        with httpx.Client(timeout=_DISCOVERY_TIMEOUT_SECONDS) as client:
            return client.get(url)

    def _discover_jwks_uri(self) -> str | None:
        discovery_url = f"{self._issuer}/.well-known/openid-configuration"
        try:
            response = self._fetch(discovery_url)
            response.raise_for_status()
            document = response.json()
        except (httpx.HTTPError, ValueError):
            logger.warning("oidc_discovery_failed", url=discovery_url, exc_info=True)
            return None

        if not isinstance(document, dict):
            logger.warning("oidc_discovery_invalid_document", url=discovery_url)
            return None

        discovered_issuer = str(document.get("issuer", "")).rstrip("/")
        if discovered_issuer != self._issuer:
            logger.warning(
                "oidc_discovery_issuer_mismatch",
                expected=self._issuer,
                discovered=discovered_issuer,
            )
            return None

        jwks_uri = document.get("jwks_uri")
        if not isinstance(jwks_uri, str) or not jwks_uri:
            logger.warning("oidc_discovery_no_jwks_uri", url=discovery_url)
            return None
        return jwks_uri
