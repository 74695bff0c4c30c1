"""Request-scoped principal storage.

The authentication middleware writes the principal into the request's
state bag (ASGI ``scope["state"]``) under a fixed key. Anything holding
the same request can read it back. Nothing here outlives the request.

Usage:
    from oauthgate.request_state import get_current_user

    async def handler(request: Request) -> Response:
        user = get_current_user(request)  # None when unauthenticated
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from oauthgate.principal import ClaimsPrincipal

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

PRINCIPAL_KEY = "identity.currentprincipal"


def _state_bag(connection: HTTPConnection) -> dict[str, Any]:
    # Same dict Starlette exposes through ``request.state``.
    return connection.scope.setdefault("state", {})


def set_current_user(connection: HTTPConnection, principal: ClaimsPrincipal) -> None:
    """Attach the authenticated principal to the request."""
    _state_bag(connection)[PRINCIPAL_KEY] = principal


def get_current_user(connection: HTTPConnection) -> ClaimsPrincipal | None:
    """Return the principal attached by the authentication middleware.

    Returns None when the middleware never ran, rejected the request, or
    the stored value is not a principal. Never raises.
    """
    state = connection.scope.get("state")
    if not isinstance(state, dict):
        return None
    principal = state.get(PRINCIPAL_KEY)
    return principal if isinstance(principal, ClaimsPrincipal) else None
