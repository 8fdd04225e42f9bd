"""Tests for perch.http.request: path normalisation, overrides, parsed params."""

import json

from perch.http.request import Request, normalize_path


def _scope(method: str = "GET", path: str = "/", query: bytes = b"", headers=()) -> dict:
    return {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query,
        "headers": list(headers),
        "http_version": "1.1",
        "client": ("127.0.0.1", 5000),
        "server": ("testserver", 80),
    }


FORM = (b"content-type", b"application/x-www-form-urlencoded")


class TestNormalizePath:
    def test_root(self) -> None:
        assert normalize_path("/") == "/"
        assert normalize_path("") == "/"

    def test_trailing_slash_removed(self) -> None:
        assert normalize_path("/articles/") == "/articles"

    def test_leading_slash_added(self) -> None:
        assert normalize_path("articles") == "/articles"

    def test_query_stripped(self) -> None:
        assert normalize_path("/articles?page=2") == "/articles"

    def test_base_path_stripped(self) -> None:
        assert normalize_path("/blog/articles/", "/blog") == "/articles"
        assert normalize_path("/blog", "/blog/") == "/"

    def test_base_path_is_segment_aware(self) -> None:
        assert normalize_path("/blogger/x", "/blog") == "/blogger/x"

    def test_path_outside_base_kept(self) -> None:
        assert normalize_path("/other", "/blog") == "/other"


class TestFromAsgi:
    def test_basic_fields(self) -> None:
        scope = _scope("get", "/articles/", b"page=2", [(b"x-token", b"abc")])
        request = Request.from_asgi(scope)
        assert request.method == "GET"
        assert request.path == "/articles"
        assert request.query.get("page") == "2"
        assert request.header("X-Token") == "abc"
        assert request.client == ("127.0.0.1", 5000)
        assert request.url == "/articles?page=2"

    def test_base_path(self) -> None:
        request = Request.from_asgi(_scope(path="/app/users"), base_path="/app")
        assert request.path == "/users"

    def test_raw_path_preferred_over_decoded_path(self) -> None:
        scope = _scope(path="/files/a/b")
        scope["raw_path"] = b"/files/a%2Fb"
        assert Request.from_asgi(scope).path == "/files/a%2Fb"

    def test_decoded_path_used_without_raw_path(self) -> None:
        assert Request.from_asgi(_scope(path="/files/x")).path == "/files/x"

    def test_full_url_includes_base_path(self) -> None:
        request = Request.from_asgi(_scope(path="/app/users", query=b"p=2"), base_path="/app")
        assert request.url == "/users?p=2"
        assert request.full_url == "/app/users?p=2"
        root = Request.from_asgi(_scope(path="/app", query=b"p=2"), base_path="/app")
        assert root.full_url == "/app?p=2"

    def test_full_url_outside_base_path(self) -> None:
        request = Request.from_asgi(_scope(path="/other"), base_path="/app")
        assert request.base_path == ""
        assert request.full_url == "/other"

    def test_cookies(self) -> None:
        request = Request.from_asgi(_scope(headers=[(b"cookie", b"a=1; b=hello%20world")]))
        assert request.cookie("a") == "1"
        assert request.cookie("b") == "hello world"
        assert request.cookie("missing") is None


class TestMethodOverride:
    def test_post_overridden_to_put(self) -> None:
        request = Request.from_asgi(_scope("POST", headers=[FORM]), b"_method=put&title=x")
        assert request.method == "PUT"

    def test_override_to_delete_and_patch(self) -> None:
        for value in (b"DELETE", b"PATCH"):
            request = Request.from_asgi(_scope("POST", headers=[FORM]), b"_method=" + value)
            assert request.method == value.decode()

    def test_override_only_applies_to_post(self) -> None:
        request = Request.from_asgi(_scope("GET", headers=[FORM]), b"_method=DELETE")
        assert request.method == "GET"

    def test_override_rejects_other_methods(self) -> None:
        request = Request.from_asgi(_scope("POST", headers=[FORM]), b"_method=GET")
        assert request.method == "POST"

    def test_override_ignored_for_json(self) -> None:
        headers = [(b"content-type", b"application/json")]
        request = Request.from_asgi(_scope("POST", headers=headers), b'{"_method": "PUT"}')
        assert request.method == "POST"

    def test_malformed_multipart_does_not_break(self) -> None:
        headers = [(b"content-type", b"multipart/form-data")]
        request = Request.from_asgi(_scope("POST", headers=headers), b"garbage")
        assert request.method == "POST"


class TestBody:
    def test_text(self) -> None:
        assert Request.build("POST", "/", body="héllo").text() == "héllo"

    def test_json(self) -> None:
        request = Request.build(
            "POST", "/", headers={"Content-Type": "application/json"}, body='{"a": 1}'
        )
        assert request.is_json
        assert request.json() == {"a": 1}

    def test_invalid_json_is_none(self) -> None:
        assert Request.build("POST", "/", body="{nope").json() is None

    def test_form(self) -> None:
        request = Request.build(
            "POST",
            "/",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body="title=Hello&tag=a&tag=b",
        )
        form = request.form()
        assert form["title"] == "Hello"
        assert form.get_list("tag") == ["a", "b"]

    def test_form_empty_for_other_types(self) -> None:
        request = Request.build("POST", "/", headers={"Content-Type": "text/plain"}, body="x=1")
        assert len(request.form()) == 0


class TestParams:
    def test_query_form_json_merge(self) -> None:
        request = Request.build(
            "POST",
            "/?a=query&b=query",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body="b=form&c=form",
        )
        assert request.params == {"a": "query", "b": "form", "c": "form"}
        assert request.param("c") == "form"
        assert request.param("missing", "dflt") == "dflt"

    def test_json_object_wins(self) -> None:
        request = Request.build(
            "POST",
            "/?a=query",
            headers={"Content-Type": "application/json"},
            body=json.dumps({"a": "json", "n": 3}),
        )
        assert request.params == {"a": "json", "n": 3}

    def test_json_array_ignored(self) -> None:
        request = Request.build(
            "POST", "/?a=1", headers={"Content-Type": "application/json"}, body="[1, 2]"
        )
        assert request.params == {"a": "1"}


class TestFlags:
    def test_is_ajax(self) -> None:
        request = Request.build("GET", "/", headers={"X-Requested-With": "XMLHttpRequest"})
        assert request.is_ajax
        assert not Request.build("GET", "/").is_ajax

    def test_cgi_style_header_lookup(self) -> None:
        request = Request.build("GET", "/", headers={"Content-Type": "text/plain"})
        assert request.header("content_type") == "text/plain"


class TestStateAndHooks:
    def test_state_is_per_request(self) -> None:
        first = Request.build("GET", "/")
        second = Request.build("GET", "/")
        first.state["user"] = 1
        assert "user" not in second.state

    def test_on_response_hooks_recorded(self) -> None:
        request = Request.build("GET", "/")
        calls = []
        request.on_response(calls.append)
        assert request.response_hooks == (calls.append,)
