"""Tests for perch.http headers, query params and cookie parsing."""

from perch.http.cookies import SetCookie, parse_cookies
from perch.http.headers import Headers
from perch.http.query import QueryParams


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers(((b"content-type", b"text/html"),))
        assert headers["Content-Type"] == "text/html"
        assert "CONTENT-TYPE" in headers

    def test_underscore_alias(self) -> None:
        headers = Headers.from_dict({"X-Request-Id": "7"})
        assert headers.get("x_request_id") == "7"

    def test_multi_value(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("ACCEPT") == ["a", "b"]
        assert list(headers) == ["accept"]
        assert len(headers) == 1

    def test_missing(self) -> None:
        headers = Headers()
        assert headers.get("x") is None
        assert headers.get("x", "d") == "d"
        assert 3 not in headers


class TestQueryParams:
    def test_parse(self) -> None:
        query = QueryParams(b"a=1&b=two&a=3")
        assert query["a"] == "1"
        assert query.get_list("a") == ["1", "3"]
        assert query.to_dict() == {"a": "1", "b": "two"}
        assert query.raw == b"a=1&b=two&a=3"

    def test_str_input_and_blank_values(self) -> None:
        query = QueryParams("q=&page=2")
        assert query.get("q") == ""
        assert query.get_int("page") == 2

    def test_get_int_fallback(self) -> None:
        query = QueryParams(b"page=abc")
        assert query.get_int("page", 1) == 1
        assert query.get_int("missing") is None

    def test_percent_decoding(self) -> None:
        assert QueryParams(b"name=caf%C3%A9").get("name") == "café"


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies('a=1; b="quoted"; junk; c=x%3By') == {
            "a": "1",
            "b": "quoted",
            "c": "x;y",
        }

    def test_empty(self) -> None:
        assert parse_cookies("") == {}

    def test_set_cookie_attributes(self) -> None:
        value = SetCookie(
            "sid",
            "v",
            max_age=10,
            domain="example.com",
            secure=True,
            httponly=False,
            samesite="Strict",
        ).to_header_value()
        assert value == "sid=v; Max-Age=10; Path=/; Domain=example.com; Secure; SameSite=Strict"
