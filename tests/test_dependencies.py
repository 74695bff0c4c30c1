"""Tests for FastAPI principal dependencies and their RFC 7807 error responses."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from oauthgate.dependencies import CurrentUser
from oauthgate.error_handlers import PROBLEM_MEDIA_TYPE, register_exception_handlers
from oauthgate.exceptions import AuthenticationError
from oauthgate.middleware.redirect_suppression import SUPPRESS_REDIRECT_HEADER
from oauthgate.principal import Claim, ClaimsPrincipal
from oauthgate.request_state import set_current_user


def _make_app(principal: ClaimsPrincipal | None) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.middleware("http")
    async def attach_principal(request: Request, call_next):  # type: ignore[no-untyped-def]
        if principal is not None:
            set_current_user(request, principal)
        return await call_next(request)

    @app.get("/me")
    def me(user: CurrentUser) -> dict[str, str | None]:
        return {"name": user.name}

    return app


def _principal() -> ClaimsPrincipal:
    return ClaimsPrincipal(claims=(Claim("name", "alice"),), authentication_type="swt")


@pytest.mark.unit
class TestRequireCurrentUser:
    def test_returns_attached_principal(self) -> None:
        client = TestClient(_make_app(_principal()))
        response = client.get("/me")
        assert response.status_code == 200
        assert response.json() == {"name": "alice"}

    def test_missing_principal_is_401_problem(self) -> None:
        client = TestClient(_make_app(None))
        response = client.get("/me")
        assert response.status_code == 401
        assert response.headers["content-type"] == PROBLEM_MEDIA_TYPE
        assert response.headers[SUPPRESS_REDIRECT_HEADER] == "true"
        body = response.json()
        assert body["error_code"] == "NOT_AUTHENTICATED"
        assert body["instance"] == "/me"

    def test_anonymous_principal_is_401(self) -> None:
        client = TestClient(_make_app(ClaimsPrincipal()))
        assert client.get("/me").status_code == 401


@pytest.mark.unit
class TestRegisterExceptionHandlers:
    def test_registers_only_authentication_error(self) -> None:
        app = FastAPI()
        before = set(app.exception_handlers)
        register_exception_handlers(app)
        assert set(app.exception_handlers) - before == {AuthenticationError}

    def test_current_user_does_not_gate_on_claims(self) -> None:
        principal = ClaimsPrincipal(claims=(Claim("role", "viewer"),), authentication_type="swt")
        response = TestClient(_make_app(principal)).get("/me")
        assert response.status_code == 200
        assert response.json() == {"name": None}
