"""Controller base class.

Controllers live in ``<namespace>/Modules/<Module>/Controllers/`` and are
referenced from routes as ``"ArticleController@show"``. The pipeline
builds one instance per request and calls the action with the route's
parameters, positionally, in the order they appear in the pattern::

    class ArticleController(Controller):
        def show(self, id):
            article = self.service(ArticleRepository).get(int(id))
            return self.view_with_layout("show", article=article, title=article.title)
"""

from typing import Any

from perch.context import RequestContext
from perch.http.request import Request
from perch.http.response import Response
from perch.views import Layout

MODULES_SEGMENT = "Modules"


def module_from_dotted(dotted: str) -> str | None:
    """``"blog.Modules.News.Controllers.article"`` -> ``"News"``."""
    parts = dotted.split(".")
    for index, part in enumerate(parts[:-1]):
        if part == MODULES_SEGMENT:
            return parts[index + 1]
    return None


class Controller:
    """Base class for module controllers."""

    def __init__(self, ctx: RequestContext) -> None:
        self.ctx = ctx

    @property
    def app(self) -> Any:
        return self.ctx.app

    @property
    def request(self) -> Request:
        return self.ctx.request

    @property
    def response(self) -> Response:
        return self.ctx.response

    @property
    def module(self) -> str | None:
        """The module owning this controller.

        Taken from the class's import path; controllers registered by hand
        outside a ``Modules`` package fall back to the route's module.
        """
        return module_from_dotted(type(self).__module__) or self.ctx.module

    def service(self, key: Any) -> Any:
        return self.ctx.service(key)

    # -- Views --

    def view(self, name: str, **data: Any) -> str:
        return self.ctx.views.render(name, data, module=self.module)

    def view_with_layout(self, view: str, layout: str | None = None, **data: Any) -> str:
        """Render *view*, then wrap it in *layout* (default: the shared layout)."""
        content = self.view(view, **data)
        return self.ctx.views.render_layout(content, data, layout)

    def create_layout(self, title: str = "") -> Layout:
        return Layout(self.ctx.views, title)

    # -- Responses --

    def json(self, data: Any, status: int = 200) -> Response:
        return self.response.json(data, status)

    def redirect(self, url: str, status: int = 302) -> Response:
        return self.response.redirect(url, status)
