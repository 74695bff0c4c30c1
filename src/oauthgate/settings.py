"""Authentication configuration settings.

Loaded from environment variables with OAUTH_ prefix.
Follows Pydantic BaseSettings pattern for type-safe configuration.

Environment Variables:
    OAUTH_ISSUER: Expected token issuer
    OAUTH_AUDIENCE: Expected token audience
    OAUTH_SWT_SIGNING_KEY: Base64 HMAC-SHA256 key for Simple Web Tokens
    OAUTH_JWT_SECRET: Shared HS256 secret for JWTs
    OAUTH_JWT_ISSUER: OIDC issuer whose published keys verify RS256 JWTs
    OAUTH_JWKS_CACHE_TTL: JWKS key cache TTL in seconds
    OAUTH_CLOCK_SKEW_SECONDS: Tolerance applied to token expiry
    OAUTH_CONTROLLERS: Comma-separated controller allow-list
"""

from __future__ import annotations

import base64
import binascii
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Validation authority configuration loaded from environment variables.

    Example:
        >>> settings = AuthSettings()
        >>> settings.controller_allow_list is None
        True
        >>> settings.is_authority_configured()
        False
    """

    model_config = SettingsConfigDict(
        env_prefix="OAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    issuer: str = Field(
        default="",
        description="Expected token issuer",
    )
    audience: str = Field(
        default="",
        description="Expected token audience",
    )
    swt_signing_key: str = Field(
        default="",
        repr=False,  # Security: never log signing keys
        description="Base64-encoded HMAC-SHA256 key for Simple Web Tokens",
    )
    jwt_secret: str = Field(
        default="",
        repr=False,
        description="Shared HS256 secret for JWTs",
    )
    jwt_issuer: str = Field(
        default="",
        description="OIDC issuer for RS256 JWTs; keys are fetched from its JWKS",
    )
    jwks_cache_ttl: int = Field(
        default=300,
        ge=30,
        le=86400,
        description="JWKS key cache TTL in seconds",
    )
    clock_skew_seconds: int = Field(
        default=0,
        ge=0,
        le=600,
        description="Tolerance applied when checking token expiry",
    )
    controllers: str = Field(
        default="",
        description="Comma-separated controller names the gate applies to",
    )

    @property
    def controller_allow_list(self) -> tuple[str, ...] | None:
        """Configured controllers, or None for no restriction."""
        names = tuple(name.strip() for name in self.controllers.split(",") if name.strip())
        return names or None

    def swt_key_bytes(self) -> bytes:
        """Decode the SWT signing key.

        Raises:
            ValueError: If the key is not valid base64.
        """
        try:
            return base64.b64decode(self.swt_signing_key, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("OAUTH_SWT_SIGNING_KEY must be base64-encoded") from exc

    def is_authority_configured(self) -> bool:
        """Check whether at least one token format can be validated (non-throwing)."""
        return bool(self.swt_signing_key or self.jwt_secret or self.jwt_issuer)

    def validate_authority_config(self) -> None:
        """Validate configuration completeness.

        Raises:
            ValueError: If no token format is configured or the SWT key is invalid.
        """
        if not self.is_authority_configured():
            raise ValueError(
                "One of OAUTH_SWT_SIGNING_KEY, OAUTH_JWT_SECRET or OAUTH_JWT_ISSUER is required"
            )

        if self.swt_signing_key:
            self.swt_key_bytes()


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """Get singleton AuthSettings instance.

    Cached for performance - settings are loaded once per process.
    Clear cache with ``get_auth_settings.cache_clear()`` for testing.

    Returns:
        AuthSettings instance with configuration from environment.
    """
    return AuthSettings()
