"""Unit tests for Basic Authorization header parsing."""

import base64

import pytest

from route53_ddns.auth.basic import parse_basic_auth


def basic(value: str) -> str:
    return "Basic " + base64.b64encode(value.encode("utf-8")).decode("ascii")


def test_parses_username_and_password() -> None:
    """Username and password are split on the first colon."""
    assert parse_basic_auth(basic("router:s3cret")) == ("router", "s3cret")


def test_password_may_contain_colons() -> None:
    """Only the first colon separates the fields."""
    assert parse_basic_auth(basic("user:a:b:c")) == ("user", "a:b:c")


def test_scheme_is_case_insensitive() -> None:
    """'basic' and 'BASIC' are accepted."""
    header = basic("u:p").replace("Basic", "bAsIc")

    assert parse_basic_auth(header) == ("u", "p")


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        "Bearer abc",
        "Basic",
        "Basic !!!not-base64!!!",
        basic("no-colon-here"),
    ],
)
def test_malformed_headers_are_rejected(header) -> None:
    """Missing, non-Basic or undecodable headers give None."""
    assert parse_basic_auth(header) is None


def test_non_utf8_payload_is_rejected() -> None:
    """Credentials must decode as UTF-8."""
    header = "Basic " + base64.b64encode(b"\xff\xfe:\xff").decode("ascii")

    assert parse_basic_auth(header) is None
