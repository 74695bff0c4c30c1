"""Login redirect for unauthorized responses, with opt-out marker.

Cookie-session hosts typically turn every 401 into a redirect to a login
page. That is wrong for API callers, so the authentication middleware
tags its 401 responses with ``X-Suppress-Forms-Redirect: true``.
``FormsRedirectMiddleware`` is the cooperating host piece:

- 401 without the marker -> 302 to ``login_url?ReturnUrl=<path>``
- 401 with the marker -> stays 401; marker is stripped
- anything else -> untouched

Pure ASGI middleware so the status can be rewritten before headers are sent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

if TYPE_CHECKING:
    from collections.abc import Callable

SUPPRESS_REDIRECT_HEADER = "X-Suppress-Forms-Redirect"

_MARKER = SUPPRESS_REDIRECT_HEADER.lower().encode("latin-1")


def _return_url(scope: dict[str, Any]) -> str:
    path = scope.get("path", "/")
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


class FormsRedirectMiddleware:
    """Redirects unauthorized responses to a login page unless suppressed.

    Args:
        app: The ASGI application.
        login_url: Login page the browser is sent to.
        return_url_parameter: Query parameter carrying the original URL.
    """

    def __init__(
        self,
        app: Any,
        login_url: str = "/login",
        return_url_parameter: str = "ReturnUrl",
    ) -> None:
        self.app = app
        self._login_url = login_url
        self._return_url_parameter = return_url_parameter

    def _location(self, scope: dict[str, Any]) -> str:
        separator = "&" if "?" in self._login_url else "?"
        query = urlencode({self._return_url_parameter: _return_url(scope)})
        return f"{self._login_url}{separator}{query}"

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Any],
        send: Callable[..., Any],
    ) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        redirected = False

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal redirected

            if message["type"] == "http.response.start" and message["status"] == 401:
                headers = list(message.get("headers", []))
                kept = [(k, v) for k, v in headers if k.lower() != _MARKER]
                if len(kept) != len(headers):
                    await send({**message, "headers": kept})
                    return

                redirected = True
                await send(
                    {
                        "type": "http.response.start",
                        "status": 302,
                        "headers": [
                            (b"location", self._location(scope).encode("latin-1")),
                            (b"content-length", b"0"),
                        ],
                    }
                )
                return

            if message["type"] == "http.response.body" and redirected:
                # Drop the original 401 body; close the redirect once it ends.
                if not message.get("more_body", False):
                    await send({"type": "http.response.body", "body": b""})
                return

            await send(message)

        await self.app(scope, receive, send_wrapper)
