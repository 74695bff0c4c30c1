"""Tests for Authorization header parsing and OAuth credential extraction."""

from __future__ import annotations

import pytest
from starlette.datastructures import Headers
from starlette.requests import Request

from oauthgate.credentials import (
    OAUTH_SCHEME,
    Credential,
    extract_credential,
    parse_authorization_header,
)


def _request(*headers: tuple[str, str]) -> Request:
    raw = [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


@pytest.mark.unit
class TestParseAuthorizationHeader:
    def test_splits_scheme_and_parameter(self) -> None:
        assert parse_authorization_header("OAuth abc=1&HMACSHA256=x") == (
            "OAuth",
            "abc=1&HMACSHA256=x",
        )

    def test_strips_surrounding_whitespace(self) -> None:
        assert parse_authorization_header("  OAuth   token-value  ") == ("OAuth", "token-value")

    def test_scheme_only_is_unparseable(self) -> None:
        assert parse_authorization_header("OAuth") is None

    def test_empty_value_is_unparseable(self) -> None:
        assert parse_authorization_header("") is None


@pytest.mark.unit
class TestExtractCredential:
    def test_recognized_scheme_yields_credential(self) -> None:
        credential = extract_credential(_request(("Authorization", "OAuth secret-token")))
        assert credential == Credential(scheme=OAUTH_SCHEME, token="secret-token")

    def test_missing_header_yields_none(self) -> None:
        assert extract_credential(_request()) is None

    def test_other_scheme_yields_none(self) -> None:
        assert extract_credential(_request(("Authorization", "Bearer a.b.c"))) is None

    @pytest.mark.parametrize("scheme", ["oauth", "OAUTH", "Oauth"])
    def test_scheme_match_is_case_sensitive(self, scheme: str) -> None:
        assert extract_credential(_request(("Authorization", f"{scheme} token"))) is None

    def test_scheme_without_parameter_yields_none(self) -> None:
        assert extract_credential(_request(("Authorization", "OAuth   "))) is None

    def test_multiple_authorization_headers_yield_none(self) -> None:
        request = _request(("Authorization", "OAuth one"), ("Authorization", "OAuth two"))
        assert extract_credential(request) is None

    def test_accepts_headers_directly(self) -> None:
        headers = Headers({"authorization": "OAuth token"})
        assert extract_credential(headers) == Credential(scheme="OAuth", token="token")

    def test_custom_scheme(self) -> None:
        credential = extract_credential(_request(("Authorization", "WRAP token")), scheme="WRAP")
        assert credential is not None
        assert credential.scheme == "WRAP"

    def test_repr_hides_token(self) -> None:
        credential = Credential(scheme="OAuth", token="very-secret")
        assert "very-secret" not in repr(credential)
        assert "11 chars" in repr(credential)
