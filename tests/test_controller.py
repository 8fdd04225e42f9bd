"""Tests for perch.controller and perch.context."""

import json

import pytest

from perch.config import AppConfig
from perch.container import ServiceContainer
from perch.context import RequestContext, get_request, request_var
from perch.controller import Controller, module_from_dotted
from perch.http.request import Request
from perch.http.response import Response
from perch.views import ViewRenderer


def _ctx(views_root, module: str | None = "Blog") -> RequestContext:
    container = ServiceContainer()
    container.instance("greeting", "hi")
    return RequestContext(
        request=Request.build("GET", "/"),
        response=Response(),
        container=container,
        views=ViewRenderer(AppConfig(root_path=views_root)),
        module=module,
    )


class TestModuleFromDotted:
    def test_found(self) -> None:
        assert module_from_dotted("blog.Modules.News.Controllers.article") == "News"

    def test_not_under_modules(self) -> None:
        assert module_from_dotted("blog.controllers") is None
        assert module_from_dotted("blog.Modules") is None


class TestController:
    def test_accessors(self, views_root) -> None:
        ctx = _ctx(views_root)
        controller = Controller(ctx)
        assert controller.request is ctx.request
        assert controller.response is ctx.response
        assert controller.module == "Blog"
        assert controller.service("greeting") == "hi"

    def test_view_and_layout(self, views_root) -> None:
        controller = Controller(_ctx(views_root))
        assert controller.view("index", name="Ada") == "<p>Ada</p>"
        assert controller.view_with_layout("index", title="T", name="Ada") == (
            "<title>T</title><main><p>Ada</p></main>"
        )
        assert controller.view_with_layout("index", "plain", name="x") == "[<p>x</p>]"

    def test_create_layout(self, views_root) -> None:
        controller = Controller(_ctx(views_root))
        layout = controller.create_layout("Hello")
        layout.set_content(controller.view("Shop:cart", count=2))
        assert layout.render() == "<title>Hello</title><main>cart:2</main>"

    def test_json_and_redirect(self, views_root) -> None:
        controller = Controller(_ctx(views_root))
        response = controller.json({"a": 1}, 201)
        assert response is controller.response
        assert response.status == 201
        assert json.loads(response.text) == {"a": 1}
        assert controller.redirect("/next").header("Location") == "/next"


class TestRequestContext:
    def test_view_uses_route_module(self, views_root) -> None:
        assert _ctx(views_root).view("index", name="x") == "<p>x</p>"

    def test_get_request(self) -> None:
        request = Request.build("GET", "/ctx")
        token = request_var.set(request)
        try:
            assert get_request() is request
        finally:
            request_var.reset(token)

    def test_get_request_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_request()
