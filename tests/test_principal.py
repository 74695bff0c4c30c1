"""Tests for Claim, claims_from_mapping and ClaimsPrincipal."""

from __future__ import annotations

import dataclasses

import pytest

from oauthgate.principal import Claim, ClaimsPrincipal, claims_from_mapping


@pytest.mark.unit
class TestClaimsFromMapping:
    def test_scalars_become_single_claims(self) -> None:
        claims = claims_from_mapping({"sub": "u-1", "exp": 1700000000}, issuer="iss")
        assert claims == (
            Claim("sub", "u-1", "iss"),
            Claim("exp", "1700000000", "iss"),
        )

    def test_lists_produce_one_claim_per_item(self) -> None:
        claims = claims_from_mapping({"roles": ["admin", "viewer"]})
        assert [c.value for c in claims] == ["admin", "viewer"]
        assert all(c.type == "roles" for c in claims)

    def test_none_values_are_dropped(self) -> None:
        assert claims_from_mapping({"email": None, "roles": [None, "admin"]}) == (
            Claim("roles", "admin"),
        )


@pytest.mark.unit
class TestClaimsPrincipal:
    def test_authenticated_when_authentication_type_set(self) -> None:
        assert ClaimsPrincipal(authentication_type="swt").is_authenticated is True

    def test_anonymous_principal_is_not_authenticated(self) -> None:
        assert ClaimsPrincipal().is_authenticated is False

    def test_name_checks_claim_types_in_order(self) -> None:
        principal = ClaimsPrincipal(
            claims=(Claim("sub", "u-1"), Claim("preferred_username", "alice")),
            authentication_type="jwt",
        )
        assert principal.name == "alice"

    def test_name_is_none_without_name_claims(self) -> None:
        assert ClaimsPrincipal(claims=(Claim("email", "a@example.com"),)).name is None

    def test_has_claim_with_and_without_value(self) -> None:
        principal = ClaimsPrincipal(claims=(Claim("role", "admin"),))
        assert principal.has_claim("role") is True
        assert principal.has_claim("role", "admin") is True
        assert principal.has_claim("role", "viewer") is False
        assert principal.has_claim("Role") is False

    def test_find_all_and_find_first(self) -> None:
        principal = ClaimsPrincipal(claims=(Claim("group", "a"), Claim("group", "b")))
        assert principal.find_first("group") == "a"
        assert [c.value for c in principal.find_all("group")] == ["a", "b"]
        assert principal.find_first("missing") is None

    def test_iterates_claims(self) -> None:
        claims = (Claim("a", "1"), Claim("b", "2"))
        assert list(ClaimsPrincipal(claims=claims)) == list(claims)

    def test_is_immutable(self) -> None:
        principal = ClaimsPrincipal(authentication_type="swt")
        with pytest.raises(dataclasses.FrozenInstanceError):
            principal.authentication_type = None  # type: ignore[misc]
