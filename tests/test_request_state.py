"""Tests for request-scoped principal storage and the principal accessor."""

from __future__ import annotations

from typing import Any

import pytest
from starlette.requests import Request

from oauthgate.principal import ClaimsPrincipal
from oauthgate.request_state import PRINCIPAL_KEY, get_current_user, set_current_user


def _request(**extra: Any) -> Request:
    scope: dict[str, Any] = {"type": "http", "method": "GET", "path": "/", "headers": []}
    scope.update(extra)
    return Request(scope)


@pytest.mark.unit
class TestPrincipalAccessor:
    def test_returns_none_when_gate_never_ran(self) -> None:
        assert get_current_user(_request()) is None
        assert get_current_user(_request(state={})) is None

    def test_returns_exact_instance_written(self) -> None:
        principal = ClaimsPrincipal(authentication_type="swt")
        request = _request(state={})
        set_current_user(request, principal)
        assert get_current_user(request) is principal

    def test_written_under_well_known_key(self) -> None:
        principal = ClaimsPrincipal(authentication_type="swt")
        request = _request()
        set_current_user(request, principal)
        assert request.scope["state"][PRINCIPAL_KEY] is principal
        assert PRINCIPAL_KEY == "identity.currentprincipal"

    def test_visible_through_request_state(self) -> None:
        principal = ClaimsPrincipal(authentication_type="swt")
        request = _request(state={})
        set_current_user(request, principal)
        assert getattr(request.state, PRINCIPAL_KEY) is principal

    def test_shared_by_requests_over_the_same_scope(self) -> None:
        principal = ClaimsPrincipal(authentication_type="swt")
        first = _request(state={})
        set_current_user(first, principal)
        assert get_current_user(Request(first.scope)) is principal

    def test_ignores_foreign_values(self) -> None:
        assert get_current_user(_request(state={PRINCIPAL_KEY: "alice"})) is None
