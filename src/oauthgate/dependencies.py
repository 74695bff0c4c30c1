"""FastAPI dependency functions for the authenticated principal.

Usage:
    from oauthgate.dependencies import CurrentUser

    @router.get("/orders")
    def list_orders(user: CurrentUser) -> list[Order]:
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from oauthgate.exceptions import AuthenticationError
from oauthgate.principal import ClaimsPrincipal
from oauthgate.request_state import get_current_user


def require_current_user(request: Request) -> ClaimsPrincipal:
    """FastAPI dependency that returns the authenticated principal.

    Raises:
        AuthenticationError: If the authentication middleware attached none.
    """
    principal = get_current_user(request)
    if principal is None or not principal.is_authenticated:
        raise AuthenticationError("Authentication is required")
    return principal


CurrentUser = Annotated[ClaimsPrincipal, Depends(require_current_user)]
