"""Auth lifespan hook: logging setup and validation authority pre-warming.

Initializing the authority at startup surfaces configuration errors in the
startup log. A failure here is logged and left to the first request, which
retries initialization.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from starlette.concurrency import run_in_threadpool

from oauthgate.authority import get_authority_provider
from oauthgate.exceptions import AuthorityInitializationError
from oauthgate.logging import configure_logging, get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from oauthgate.authority import AuthorityProvider

logger = get_logger(__name__)


@asynccontextmanager
async def auth_lifespan(
    app: Any,
    provider: AuthorityProvider | None = None,
) -> AsyncIterator[None]:
    """Manage auth resources across the application lifecycle.

    Startup:
        1. Configure structured logging.
        2. Initialize the validation authority.

    Args:
        app: The application instance (unused but required by protocol).
        provider: Provider to pre-warm. Defaults to the process-wide one.
    """
    configure_logging()
    provider = provider if provider is not None else get_authority_provider()

    try:
        await run_in_threadpool(provider.get)
        logger.info("auth_lifespan_authority_ready")
    except AuthorityInitializationError:
        logger.warning("auth_lifespan_prewarm_failed", exc_info=True)

    try:
        yield
    finally:
        logger.info("auth_lifespan_shutdown_complete")
