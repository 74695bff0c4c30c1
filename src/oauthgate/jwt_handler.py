"""JWT token handler backed by PyJWT.

Signature keys come from a shared HS256 secret when one is configured,
otherwise from an issuer's published key set (RS256). PyJWT errors are
mapped to ``RejectionReason`` values; errors outside PyJWT's hierarchy
propagate to the gateway.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import jwt as pyjwt

from oauthgate.principal import claims_from_mapping
from oauthgate.validation import ClaimsValidated, RejectionReason, TokenRejected

if TYPE_CHECKING:
    from oauthgate.jwks import IssuerKeySet
    from oauthgate.validation import ValidationResult

_REQUIRED_CLAIMS = ["exp"]


class JWTTokenHandler:
    """Token handler for signed JSON Web Tokens.

    Args:
        issuer: Expected ``iss`` claim. Empty string skips the check.
        audience: Expected ``aud`` claim. Empty string skips the check.
        secret: Shared HS256 secret. Takes precedence over key_set.
        key_set: Issuer signing keys for RS256 tokens.
        leeway: Seconds of tolerance for ``exp``/``nbf``.

    Raises:
        ValueError: If neither secret nor key_set is given.
    """

    token_type = "jwt"

    def __init__(
        self,
        *,
        issuer: str = "",
        audience: str = "",
        secret: str = "",
        key_set: IssuerKeySet | None = None,
        leeway: int = 0,
    ) -> None:
        if not secret and key_set is None:
            raise ValueError("JWT validation requires a shared secret or an issuer key set")
        self._issuer = issuer
        self._audience = audience
        self._secret = secret
        self._key_set = key_set
        self._leeway = leeway

    def can_read_token(self, token: str) -> bool:
        return token.count(".") == 2

    def _signing_key(self, token: str) -> tuple[Any, list[str]]:
        if self._secret:
            return self._secret, ["HS256"]
        assert self._key_set is not None  # noqa: S101 -- guarded in __init__
        return self._key_set.get_signing_key_from_jwt(token).key, ["RS256"]

    def validate_token(self, token: str) -> ValidationResult:
        try:
            key, algorithms = self._signing_key(token)
            claims = pyjwt.decode(
                token,
                key,
                algorithms=algorithms,
                issuer=self._issuer or None,
                audience=self._audience or None,
                leeway=self._leeway,
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_aud": bool(self._audience),
                },
            )
        except pyjwt.PyJWKClientError as exc:
            return TokenRejected(
                RejectionReason.AUTHORITY_ERROR, f"Signing key lookup failed: {exc}"
            )
        except pyjwt.ExpiredSignatureError:
            return TokenRejected(RejectionReason.TOKEN_EXPIRED, "Token has expired")
        except pyjwt.InvalidIssuerError:
            return TokenRejected(RejectionReason.INVALID_ISSUER, "Invalid issuer claim")
        except pyjwt.InvalidAudienceError:
            return TokenRejected(RejectionReason.INVALID_AUDIENCE, "Invalid audience claim")
        except pyjwt.MissingRequiredClaimError as exc:
            return TokenRejected(RejectionReason.INVALID_CLAIMS, f"Missing required claim: {exc}")
        except pyjwt.InvalidSignatureError:
            return TokenRejected(
                RejectionReason.INVALID_SIGNATURE, "Token signature verification failed"
            )
        except pyjwt.DecodeError:
            return TokenRejected(RejectionReason.MALFORMED_TOKEN, "Token is malformed")
        except pyjwt.InvalidTokenError as exc:
            return TokenRejected(RejectionReason.INVALID_CLAIMS, f"Token validation failed: {exc}")

        issuer = claims.get("iss")
        return ClaimsValidated(
            claims=claims_from_mapping(claims, issuer=str(issuer) if issuer else None),
            token_type=self.token_type,
        )
