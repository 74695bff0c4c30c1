"""OAuth authentication middleware.

Makes authentication mandatory for every request in its controller scope.
Takes the ``OAuth`` credential from the Authorization header, validates
it through the ValidationGateway, and stores the resulting principal in
``request.state`` under ``"identity.currentprincipal"`` for downstream
handlers.

Request flow:
  1. Outside the controller scope -> pass through untouched
  2. Extract ``Authorization: OAuth <token>`` (absent is not an error here)
  3. Validate via the gateway (threadpool; blocking authorities are fine)
  4a. Accepted -> attach principal, forward, return the response unchanged
  4b. Rejected -> 401 with ``X-Suppress-Forms-Redirect: true``, never forward

Design decisions:
- Every rejection produces the same 401 with no body. The internal reason
  (missing vs. invalid credential) only reaches the logs.
- The principal is written after validation completes. A cancelled call
  therefore leaves no principal behind.
- Authority initialization failures are server errors and propagate.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from oauthgate.authority import get_authority_provider
from oauthgate.credentials import OAUTH_SCHEME, extract_credential
from oauthgate.exceptions import ValidationRejected
from oauthgate.gateway import ValidationGateway
from oauthgate.logging import get_logger
from oauthgate.middleware.redirect_suppression import SUPPRESS_REDIRECT_HEADER
from oauthgate.middleware.scoped_filter import ControllerScope
from oauthgate.request_state import set_current_user
from oauthgate.routing import resolve_controller

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from starlette.requests import Request

    from oauthgate.routing import ControllerResolver

logger = get_logger(__name__)


def unauthorized_response() -> Response:
    """401 response carrying the redirect suppression marker."""
    return Response(status_code=401, headers={SUPPRESS_REDIRECT_HEADER: "true"})


class OAuthAuthenticationMiddleware(BaseHTTPMiddleware):
    """Mandatory OAuth authentication for in-scope requests.

    Args:
        app: ASGI application (passed by Starlette).
        gateway: Validation gateway. Defaults to one backed by the
            process-wide authority provider.
        controllers: Controller names the gate applies to. None applies
            to every request.
        resolver: Controller lookup, injectable for tests.
        scheme: Recognized Authorization scheme (exact case).
    """

    def __init__(
        self,
        app: Any,
        gateway: ValidationGateway | None = None,
        controllers: Iterable[str] | None = None,
        resolver: ControllerResolver = resolve_controller,
        scheme: str = OAUTH_SCHEME,
    ) -> None:
        super().__init__(app)
        if gateway is None:
            gateway = ValidationGateway(get_authority_provider())
        self._gateway = gateway
        self._scope = ControllerScope(controllers, resolver)
        self._scheme = scheme

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not self._scope.should_apply(request):
            return await call_next(request)

        credential = extract_credential(request, self._scheme)

        try:
            principal = await self._gateway.authenticate_async(credential)
        except ValidationRejected as exc:
            logger.info(
                "request_rejected",
                path=request.url.path,
                method=request.method,
                reason=str(exc.reason),
                credential_present=credential is not None,
            )
            return unauthorized_response()

        set_current_user(request, principal)
        logger.debug("request_admitted", path=request.url.path, principal=principal.name)
        return await call_next(request)
