"""Orders API application factory.

Middleware stack, outermost first:

1. ``FormsRedirectMiddleware``: turns unmarked 401s from the cookie-session
   pages into login redirects
2. ``ScopedRequestFilter``: defaults the ``api-version`` header for the
   ``Orders`` controller only
3. ``OAuthAuthenticationMiddleware``: mandatory OAuth credential for the
   gated controllers

Usage::

    from examples.orders_api.app import create_orders_app

    app = create_orders_app()
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from fastapi import FastAPI

from oauthgate import (
    FormsRedirectMiddleware,
    OAuthAuthenticationMiddleware,
    ScopedRequestFilter,
    ValidationGateway,
    auth_lifespan,
    get_auth_settings,
    get_authority_provider,
    register_exception_handlers,
)

from .router import customers_router, health_router, orders_router, pages_router

if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.requests import Request

    from oauthgate import AuthorityProvider

_DEFAULT_CONTROLLERS = ("Orders", "Customers")
API_VERSION_HEADER = "api-version"


class DefaultApiVersion:
    """Request transform adding ``api-version`` when the caller sent none."""

    def __init__(self, version: str) -> None:
        self._version = version

    def __call__(self, request: Request) -> Request:
        if API_VERSION_HEADER not in request.headers:
            request.scope["headers"] = [
                *request.scope["headers"],
                (API_VERSION_HEADER.encode("latin-1"), self._version.encode("latin-1")),
            ]
        return request


def create_orders_app(
    *,
    provider: AuthorityProvider | None = None,
    controllers: Iterable[str] | None = None,
    default_api_version: str = "1.0",
) -> FastAPI:
    """Create the Orders API.

    Args:
        provider: Authority provider backing the gate. Defaults to the
            process-wide provider built from ``OAUTH_*`` settings.
        controllers: Controllers requiring a credential. Defaults to
            ``OAUTH_CONTROLLERS``, falling back to Orders and Customers.
    """
    if provider is None:
        provider = get_authority_provider()
    if controllers is None:
        controllers = get_auth_settings().controller_allow_list or _DEFAULT_CONTROLLERS

    app = FastAPI(
        title="Orders API",
        version="0.1.0",
        lifespan=partial(auth_lifespan, provider=provider),
    )
    for router in (orders_router, customers_router, pages_router, health_router):
        app.include_router(router)
    register_exception_handlers(app)

    # add_middleware prepends: the last one added runs first.
    app.add_middleware(
        OAuthAuthenticationMiddleware,
        gateway=ValidationGateway(provider),
        controllers=controllers,
    )
    app.add_middleware(
        ScopedRequestFilter,
        transform=DefaultApiVersion(default_api_version),
        controllers=["Orders"],
    )
    app.add_middleware(FormsRedirectMiddleware, login_url="/login")
    return app
