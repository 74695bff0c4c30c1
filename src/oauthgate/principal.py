"""Claims-based principal representing an authenticated identity.

Pure value objects with no framework dependencies. Immutable (frozen
dataclasses) so a principal can be handed to downstream handlers without
risk of modification after validation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

# Claim types checked, in order, when resolving a display name.
_NAME_CLAIM_TYPES = ("name", "unique_name", "preferred_username", "sub", "nameidentifier")


@dataclass(frozen=True, slots=True)
class Claim:
    """A single (type, value) statement about an identity.

    Attributes:
        type: Claim type, e.g. ``"sub"`` or ``"role"``.
        value: Claim value, always a string.
        issuer: Issuer that vouched for the claim. None if unknown.
    """

    type: str
    value: str
    issuer: str | None = None


def claims_from_mapping(
    values: Mapping[str, Any],
    issuer: str | None = None,
) -> tuple[Claim, ...]:
    """Flatten a decoded token payload into claims.

    List and tuple values produce one claim per item. Non-string scalars
    are stringified. None values are dropped.

    Args:
        values: Decoded token payload.
        issuer: Issuer stamped on every produced claim.

    Returns:
        Tuple of claims in payload order.
    """
    claims: list[Claim] = []
    for claim_type, raw in values.items():
        items = raw if isinstance(raw, (list, tuple)) else (raw,)
        for item in items:
            if item is None:
                continue
            claims.append(Claim(type=str(claim_type), value=str(item), issuer=issuer))
    return tuple(claims)


@dataclass(frozen=True, slots=True)
class ClaimsPrincipal:
    """Identity produced from a validated credential.

    A principal is authenticated when it carries an authentication type,
    i.e. the token format that vouched for it.

    Attributes:
        claims: Claims extracted from the validated token.
        authentication_type: Token type (``"swt"``, ``"jwt"``). None for an
            anonymous principal.
    """

    claims: tuple[Claim, ...] = ()
    authentication_type: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.authentication_type)

    @property
    def name(self) -> str | None:
        """First claim value usable as a display name, or None."""
        for claim_type in _NAME_CLAIM_TYPES:
            value = self.find_first(claim_type)
            if value is not None:
                return value
        return None

    def __iter__(self) -> Iterator[Claim]:
        return iter(self.claims)

    def find_all(self, claim_type: str) -> tuple[Claim, ...]:
        return tuple(c for c in self.claims if c.type == claim_type)

    def find_first(self, claim_type: str) -> str | None:
        for claim in self.claims:
            if claim.type == claim_type:
                return claim.value
        return None

    def has_claim(self, claim_type: str, value: str | None = None) -> bool:
        """Check whether the principal carries a claim.

        Args:
            claim_type: Claim type to look for (case-sensitive).
            value: Required value. None accepts any value.

        Returns:
            True if a matching claim exists.
        """
        return any(
            c.type == claim_type and (value is None or c.value == value) for c in self.claims
        )
