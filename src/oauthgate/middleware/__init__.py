"""ASGI middleware: OAuth authentication, controller-scoped filtering, redirect suppression."""

from oauthgate.middleware.oauth_auth import OAuthAuthenticationMiddleware, unauthorized_response
from oauthgate.middleware.redirect_suppression import (
    SUPPRESS_REDIRECT_HEADER,
    FormsRedirectMiddleware,
)
from oauthgate.middleware.scoped_filter import (
    ControllerScope,
    RequestTransform,
    ScopedRequestFilter,
)

__all__ = [
    "SUPPRESS_REDIRECT_HEADER",
    "ControllerScope",
    "FormsRedirectMiddleware",
    "OAuthAuthenticationMiddleware",
    "RequestTransform",
    "ScopedRequestFilter",
    "unauthorized_response",
]
