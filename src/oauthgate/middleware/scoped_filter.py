"""Controller-scoped request filtering.

``ControllerScope`` answers one question: does this request route to one
of the configured controllers? Names compare case-insensitively. An
allow-list of None means every request is in scope; an empty list means
none is.

``ScopedRequestFilter`` composes a scope with a caller-supplied
``RequestTransform``: in-scope requests are transformed and the request the
transform returns is what the downstream app receives. Everything else
passes through untouched, and responses are never modified.

Usage:
    app.add_middleware(
        ScopedRequestFilter,
        transform=DefaultApiVersion("2"),
        controllers=["Orders"],
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from starlette.requests import Request, empty_receive

from oauthgate.routing import resolve_controller

if TYPE_CHECKING:
    from collections.abc import Iterable

    from starlette.requests import HTTPConnection
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

    from oauthgate.routing import ControllerResolver


@runtime_checkable
class RequestTransform(Protocol):
    """Request-phase processing applied by a ScopedRequestFilter.

    May modify the request in place or return a new one. A returned request
    built without a receive channel keeps the original one.
    """

    def __call__(self, request: Request) -> Request:
        ...


class ControllerScope:
    """Case-insensitive controller allow-list.

    Args:
        controllers: Allowed controller names. None allows everything.
        resolver: Controller lookup for a request. Defaults to
            :func:`oauthgate.routing.resolve_controller`.
    """

    def __init__(
        self,
        controllers: Iterable[str] | None = None,
        resolver: ControllerResolver = resolve_controller,
    ) -> None:
        self._controllers = tuple(controllers) if controllers is not None else None
        self._folded = (
            frozenset(name.casefold() for name in self._controllers)
            if self._controllers is not None
            else None
        )
        self._resolve = resolver

    @property
    def controllers(self) -> tuple[str, ...] | None:
        return self._controllers

    def should_apply(self, connection: HTTPConnection) -> bool:
        if self._folded is None:
            return True
        name = self._resolve(connection) or ""
        return name.casefold() in self._folded


class ScopedRequestFilter:
    """Applies a request transform only to requests within a controller scope.

    Pure ASGI middleware so the transformed request's scope and receive
    channel are the ones handed to the downstream app.

    Args:
        app: The ASGI application.
        transform: Request transform applied to in-scope requests.
        controllers: Allowed controller names. None applies to every request.
        resolver: Controller lookup, injectable for tests.
    """

    def __init__(
        self,
        app: ASGIApp,
        transform: RequestTransform,
        controllers: Iterable[str] | None = None,
        resolver: ControllerResolver = resolve_controller,
    ) -> None:
        self.app = app
        self._transform = transform
        self._scope = ControllerScope(controllers, resolver)

    @property
    def controller_scope(self) -> ControllerScope:
        return self._scope

    def process_request(self, request: Request) -> Request:
        if self._scope.should_apply(request):
            return self._transform(request)
        return request

    def process_response(self, message: Message) -> Message:
        return message

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = self.process_request(Request(scope, receive))
        downstream_receive = request.receive
        if downstream_receive is empty_receive:
            downstream_receive = receive

        async def send_wrapper(message: Message) -> None:
            await send(self.process_response(message))

        await self.app(request.scope, downstream_receive, send_wrapper)
