"""Controller (endpoint-group) resolution for Starlette/FastAPI routes.

Middleware runs before the router, so the controller is resolved by
matching the application's routes against the request scope. The
controller of a matched route is its first tag (FastAPI groups routers by
tag); a named ``Mount`` supplies its own name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from starlette.routing import Match, Mount

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from starlette.requests import HTTPConnection
    from starlette.routing import BaseRoute

    ControllerResolver = Callable[[HTTPConnection], str | None]


def controller_name(route: BaseRoute) -> str | None:
    """Controller name declared by a route, or None."""
    tags = getattr(route, "tags", None)
    if tags:
        return str(tags[0])
    return None


def _match_controller(routes: Iterable[BaseRoute], scope: dict[str, Any]) -> str | None:
    partial: BaseRoute | None = None
    partial_scope: dict[str, Any] = {}
    for route in routes:
        match, child_scope = route.matches(scope)
        if match is Match.FULL:
            return _controller_for(route, {**scope, **child_scope})
        if match is Match.PARTIAL and partial is None:
            partial, partial_scope = route, child_scope

    # Method mismatch still belongs to the same controller.
    if partial is not None:
        return _controller_for(partial, {**scope, **partial_scope})
    return None


def _controller_for(route: BaseRoute, scope: dict[str, Any]) -> str | None:
    if isinstance(route, Mount):
        if route.name:
            return route.name
        return _match_controller(route.routes, scope)
    return controller_name(route)


def resolve_controller(connection: HTTPConnection) -> str | None:
    """Resolve the controller the current request routes to.

    Args:
        connection: Current request.

    Returns:
        Controller name, or None when no route matches or the matched
        route declares no controller.
    """
    app = connection.scope.get("app")
    router = getattr(app, "router", None)
    routes = getattr(router, "routes", None)
    if not routes:
        return None
    return _match_controller(routes, connection.scope)
