"""OAuth Gate -- request authentication and controller-scoped filtering for ASGI apps.

Provides the OAuth authentication middleware, the validation gateway and
authority (Simple Web Token and JWT handlers), controller-scoped request
filters, redirect suppression for login-redirecting hosts, and FastAPI
dependencies for reading the authenticated principal.
"""

from oauthgate.authority import AuthorityProvider, ValidationAuthority, get_authority_provider
from oauthgate.credentials import OAUTH_SCHEME, Credential, extract_credential
from oauthgate.dependencies import CurrentUser, require_current_user
from oauthgate.error_handlers import register_exception_handlers
from oauthgate.exceptions import (
    AuthenticationError,
    AuthError,
    AuthorityInitializationError,
    ValidationRejected,
)
from oauthgate.gateway import ValidationGateway
from oauthgate.lifespan import auth_lifespan
from oauthgate.middleware import (
    SUPPRESS_REDIRECT_HEADER,
    ControllerScope,
    FormsRedirectMiddleware,
    OAuthAuthenticationMiddleware,
    RequestTransform,
    ScopedRequestFilter,
)
from oauthgate.principal import Claim, ClaimsPrincipal
from oauthgate.request_state import PRINCIPAL_KEY, get_current_user
from oauthgate.settings import AuthSettings, get_auth_settings
from oauthgate.validation import ClaimsValidated, RejectionReason, TokenHandler, TokenRejected

__all__ = [
    "OAUTH_SCHEME",
    "PRINCIPAL_KEY",
    "SUPPRESS_REDIRECT_HEADER",
    "AuthError",
    "AuthSettings",
    "AuthenticationError",
    "AuthorityInitializationError",
    "AuthorityProvider",
    "Claim",
    "ClaimsPrincipal",
    "ClaimsValidated",
    "ControllerScope",
    "Credential",
    "CurrentUser",
    "FormsRedirectMiddleware",
    "OAuthAuthenticationMiddleware",
    "RejectionReason",
    "RequestTransform",
    "ScopedRequestFilter",
    "TokenHandler",
    "TokenRejected",
    "ValidationAuthority",
    "ValidationGateway",
    "ValidationRejected",
    "auth_lifespan",
    "extract_credential",
    "get_auth_settings",
    "get_authority_provider",
    "get_current_user",
    "register_exception_handlers",
    "require_current_user",
]
