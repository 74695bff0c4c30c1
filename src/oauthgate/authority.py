"""Validation authority and its synchronized once-initializer.

The authority owns the ordered collection of token handlers. Constructing
it is cheap; ``initialize()`` builds the handlers from ``AuthSettings``
and must run exactly once. It performs no network I/O: an issuer's JWT
signing keys are located on the first RS256 token.

``AuthorityProvider`` guards construction and initialization with a lock
so concurrent first requests produce one authority and one ``initialize``
call. After that, ``get()`` takes a lock-free fast path. A failed
initialization leaves the provider uninitialized, so the next call retries.

Usage:
    provider = AuthorityProvider(lambda: ValidationAuthority(settings))
    gateway = ValidationGateway(provider)
"""

from __future__ import annotations

import threading
from datetime import timedelta
from functools import lru_cache
from typing import TYPE_CHECKING

from oauthgate.exceptions import AuthorityInitializationError
from oauthgate.logging import get_logger
from oauthgate.settings import get_auth_settings
from oauthgate.validation import RejectionReason, TokenRejected

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from oauthgate.settings import AuthSettings
    from oauthgate.validation import TokenHandler, ValidationResult

logger = get_logger(__name__)


class ValidationAuthority:
    """Dispatches raw tokens to the first handler able to read them.

    Args:
        settings: Configuration used by ``initialize()`` to build handlers.
            Defaults to ``get_auth_settings()``.
        handlers: Pre-built handlers. When given, ``initialize()`` uses them
            as-is and settings are ignored.
    """

    def __init__(
        self,
        settings: AuthSettings | None = None,
        handlers: Iterable[TokenHandler] | None = None,
    ) -> None:
        self._settings = settings
        self._configured_handlers = tuple(handlers) if handlers is not None else None
        self._handlers: tuple[TokenHandler, ...] = ()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def handlers(self) -> tuple[TokenHandler, ...]:
        return self._handlers

    def initialize(self) -> None:
        """Build the handler collection. No-op once initialized.

        Raises:
            AuthorityInitializationError: If no handler can be configured.
        """
        if self._initialized:
            return

        if self._configured_handlers is not None:
            handlers = self._configured_handlers
        else:
            handlers = self._build_handlers(self._settings or get_auth_settings())

        if not handlers:
            raise AuthorityInitializationError("No token handlers are configured")

        self._handlers = handlers
        self._initialized = True
        logger.info(
            "authority_initialized",
            token_types=[handler.token_type for handler in handlers],
        )

    @staticmethod
    def _build_handlers(settings: AuthSettings) -> tuple[TokenHandler, ...]:
        try:
            settings.validate_authority_config()
        except ValueError as exc:
            raise AuthorityInitializationError(str(exc)) from exc

        skew = timedelta(seconds=settings.clock_skew_seconds)
        handlers: list[TokenHandler] = []

        if settings.swt_signing_key:
            from oauthgate.swt import SimpleWebTokenHandler

            handlers.append(
                SimpleWebTokenHandler(
                    settings.swt_key_bytes(),
                    issuer=settings.issuer,
                    audience=settings.audience,
                    clock_skew=skew,
                )
            )

        if settings.jwt_secret or settings.jwt_issuer:
            from oauthgate.jwt_handler import JWTTokenHandler

            key_set = None
            if not settings.jwt_secret:
                from oauthgate.jwks import IssuerKeySet

                key_set = IssuerKeySet(settings.jwt_issuer, cache_ttl=settings.jwks_cache_ttl)

            handlers.append(
                JWTTokenHandler(
                    issuer=settings.jwt_issuer or settings.issuer,
                    audience=settings.audience,
                    secret=settings.jwt_secret,
                    key_set=key_set,
                    leeway=settings.clock_skew_seconds,
                )
            )

        return tuple(handlers)

    def validate(self, token: str | None) -> ValidationResult:
        """Validate a raw token.

        An absent token is rejected here rather than by the caller so that
        every failure goes through the authority.

        Args:
            token: Raw token, or None when no credential was presented.

        Returns:
            ``ClaimsValidated`` or ``TokenRejected``.

        Raises:
            AuthorityInitializationError: If called before ``initialize()``.
        """
        if not self._initialized:
            raise AuthorityInitializationError("Validation authority is not initialized")

        if not token:
            return TokenRejected(RejectionReason.MISSING_TOKEN, "No credential presented")

        for handler in self._handlers:
            if handler.can_read_token(token):
                return handler.validate_token(token)

        return TokenRejected(RejectionReason.UNSUPPORTED_TOKEN, "No handler can read the token")


class AuthorityProvider:
    """Lazily constructs and initializes a single ValidationAuthority.

    Args:
        factory: Callable building an uninitialized authority.
    """

    def __init__(self, factory: Callable[[], ValidationAuthority]) -> None:
        self._factory = factory
        self._authority: ValidationAuthority | None = None
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        authority = self._authority
        return authority is not None and authority.is_initialized

    def get(self) -> ValidationAuthority:
        """Return the initialized authority, constructing it on first use.

        Raises:
            AuthorityInitializationError: If construction or initialization
                fails. The provider stays uninitialized and retries next call.
        """
        authority = self._authority
        if authority is not None and authority.is_initialized:
            return authority

        with self._lock:
            try:
                if self._authority is None:
                    self._authority = self._factory()
                if not self._authority.is_initialized:
                    self._authority.initialize()
            except AuthorityInitializationError:
                logger.exception("authority_initialization_failed")
                raise
            except Exception as exc:
                logger.exception("authority_initialization_failed")
                raise AuthorityInitializationError(
                    "Validation authority could not be initialized",
                    context={"cause": type(exc).__name__},
                ) from exc
            return self._authority


@lru_cache(maxsize=1)
def get_authority_provider() -> AuthorityProvider:
    """Get the process-wide AuthorityProvider built from environment settings.

    Clear cache with ``get_authority_provider.cache_clear()`` for testing.
    """
    return AuthorityProvider(lambda: ValidationAuthority(get_auth_settings()))
