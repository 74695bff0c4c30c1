"""Tests for FormsRedirectMiddleware and the suppression marker contract."""

from __future__ import annotations

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from oauthgate.middleware.oauth_auth import unauthorized_response
from oauthgate.middleware.redirect_suppression import (
    SUPPRESS_REDIRECT_HEADER,
    FormsRedirectMiddleware,
)


async def plain_unauthorized(request: Request) -> Response:
    return PlainTextResponse("please log in", status_code=401)


async def marked_unauthorized(request: Request) -> Response:
    return unauthorized_response()


async def ok(request: Request) -> Response:
    return PlainTextResponse("ok")


def _client(**kwargs: str) -> TestClient:
    app = Starlette(
        routes=[
            Route("/page", plain_unauthorized),
            Route("/api", marked_unauthorized),
            Route("/ok", ok),
        ],
    )
    app.add_middleware(FormsRedirectMiddleware, **kwargs)
    return TestClient(app, follow_redirects=False)


@pytest.mark.unit
class TestFormsRedirect:
    def test_unmarked_401_redirects_to_login(self) -> None:
        response = _client().get("/page?tab=orders")
        assert response.status_code == 302
        assert response.headers["location"] == "/login?ReturnUrl=%2Fpage%3Ftab%3Dorders"
        assert response.content == b""

    def test_marked_401_is_left_alone(self) -> None:
        response = _client().get("/api")
        assert response.status_code == 401
        assert response.content == b""

    def test_marker_is_stripped(self) -> None:
        response = _client().get("/api")
        assert SUPPRESS_REDIRECT_HEADER not in response.headers

    def test_other_responses_pass_through(self) -> None:
        response = _client().get("/ok")
        assert response.status_code == 200
        assert response.text == "ok"

    def test_custom_login_url_and_parameter(self) -> None:
        client = _client(login_url="/account/signin?lang=en", return_url_parameter="next")
        response = client.get("/page")
        assert response.headers["location"] == "/account/signin?lang=en&next=%2Fpage"


@pytest.mark.unit
class TestUnauthorizedResponse:
    def test_carries_marker_and_no_body(self) -> None:
        response = unauthorized_response()
        assert response.status_code == 401
        assert response.headers[SUPPRESS_REDIRECT_HEADER] == "true"
        assert response.body == b""
