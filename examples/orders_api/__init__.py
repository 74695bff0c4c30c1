"""Orders API -- minimal example app demonstrating the OAuth gate.

Exposes an in-memory order book behind ``OAuthAuthenticationMiddleware``.
Only the ``Orders`` and ``Customers`` controllers require a credential;
health checks and the cookie-session pages stay outside the gate.

Modules:
    router: FastAPI endpoints grouped by controller tag
    app:    Application factory (create_orders_app)
"""

from .app import DefaultApiVersion, create_orders_app

__all__ = ["DefaultApiVersion", "create_orders_app"]
