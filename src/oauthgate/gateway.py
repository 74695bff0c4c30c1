"""Validation gateway: credential in, principal out, or ValidationRejected.

The gateway is the boundary where explicit validation outcomes become a
binary accept/reject surface. Every rejection, including an absent
credential and an error raised inside the authority, leaves as
``ValidationRejected``. The internal reason is logged, not returned.

``AuthorityInitializationError`` is not a rejection and propagates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.concurrency import run_in_threadpool

from oauthgate.exceptions import ValidationRejected
from oauthgate.logging import get_logger
from oauthgate.principal import ClaimsPrincipal
from oauthgate.validation import RejectionReason, TokenRejected

if TYPE_CHECKING:
    from oauthgate.authority import AuthorityProvider
    from oauthgate.credentials import Credential

logger = get_logger(__name__)


class ValidationGateway:
    """Authenticates credentials against the provider's authority.

    Args:
        provider: Once-initializer owning the validation authority.

    Example:
        >>> gateway = ValidationGateway(get_authority_provider())
        >>> principal = gateway.authenticate(credential)
    """

    def __init__(self, provider: AuthorityProvider) -> None:
        self._provider = provider

    @property
    def provider(self) -> AuthorityProvider:
        return self._provider

    def authenticate(self, credential: Credential | None) -> ClaimsPrincipal:
        """Validate a credential and build an authenticated principal.

        Args:
            credential: Extracted credential, or None if none was presented.
                None is still forwarded to the authority for its verdict.

        Returns:
            Authenticated ClaimsPrincipal.

        Raises:
            ValidationRejected: For any validation failure.
            AuthorityInitializationError: If the authority cannot be initialized.
        """
        authority = self._provider.get()
        token = credential.token if credential is not None else None
        if token is None:
            logger.debug("credential_absent")

        try:
            result = authority.validate(token)
        except Exception as exc:
            logger.exception("authority_validation_error")
            raise ValidationRejected(RejectionReason.AUTHORITY_ERROR, str(exc)) from exc

        if isinstance(result, TokenRejected):
            logger.info("token_rejected", reason=str(result.reason), detail=result.detail)
            raise ValidationRejected(result.reason, result.detail)

        return ClaimsPrincipal(claims=result.claims, authentication_type=result.token_type)

    async def authenticate_async(self, credential: Credential | None) -> ClaimsPrincipal:
        """Run ``authenticate`` in the threadpool so blocking validation never stalls the loop."""
        return await run_in_threadpool(self.authenticate, credential)
