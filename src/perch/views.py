"""View rendering with kida.

Views are kida templates stored per module under ``Views/<name>.html``;
layouts live in the shared views directory. One kida ``Environment`` is
created per template directory and reused.

View names resolve three ways::

    "index"           -> <current module>/Views/index.html
    "Blog:show"       -> <Blog module>/Views/show.html
    "/emails/welcome" -> <root_path>/emails/welcome.html
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader
from kida.template import Markup

from perch.config import AppConfig
from perch.errors import ViewNotFoundError

VIEW_SUFFIX = ".html"


class ViewRenderer:
    """Resolve view names to template files and render them."""

    __slots__ = ("_config", "_environments", "_lock", "_module_paths")

    def __init__(self, config: AppConfig, module_paths: Mapping[str, Path] | None = None) -> None:
        self._config = config
        self._module_paths: dict[str, Path] = dict(module_paths or {})
        self._environments: dict[Path, Environment] = {}
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return Path(self._config.root_path)

    @property
    def shared_path(self) -> Path:
        return self.root / self._config.shared_views_path

    def add_module(self, name: str, path: Path) -> None:
        self._module_paths[name] = Path(path)

    def module_views_dir(self, module: str) -> Path:
        base = self._module_paths.get(module, self.root / "Modules" / module)
        return base / "Views"

    # -- Resolution --

    def resolve(self, view: str, module: str | None = None) -> Path:
        """Map a view name to its template file (which may not exist)."""
        if view.startswith("/"):
            return self.root / (view.lstrip("/") + VIEW_SUFFIX)
        if ":" in view:
            owner, _, name = view.partition(":")
            return self.module_views_dir(owner) / (name + VIEW_SUFFIX)
        if module is None:
            msg = f"Cannot resolve view {view!r}: no module. Use 'Module:{view}' or '/path'."
            raise ViewNotFoundError(msg)
        return self.module_views_dir(module) / (view + VIEW_SUFFIX)

    def layout_path(self, layout: str | None = None) -> Path:
        name = layout or self._config.default_layout
        if name.startswith("/"):
            return self.root / (name.lstrip("/") + VIEW_SUFFIX)
        return self.shared_path / (name + VIEW_SUFFIX)

    # -- Rendering --

    def environment(self, directory: Path) -> Environment:
        """The kida environment for templates under *directory*."""
        env = self._environments.get(directory)
        if env is not None:
            return env
        with self._lock:
            env = self._environments.get(directory)
            if env is None:
                env = Environment(
                    loader=FileSystemLoader(str(directory)),
                    autoescape=self._config.autoescape,
                    auto_reload=self._config.debug,
                    trim_blocks=self._config.trim_blocks,
                    lstrip_blocks=self._config.lstrip_blocks,
                )
                self._environments[directory] = env
        return env

    def render_file(self, path: Path, data: Mapping[str, Any]) -> str:
        if not path.is_file():
            msg = f"View {str(path)!r} not found"
            raise ViewNotFoundError(msg)
        template = self.environment(path.parent).get_template(path.name)
        return template.render(dict(data))

    def render(self, view: str, data: Mapping[str, Any], module: str | None = None) -> str:
        return self.render_file(self.resolve(view, module), data)

    def render_layout(
        self,
        content: str,
        data: Mapping[str, Any],
        layout: str | None = None,
    ) -> str:
        """Render *layout* around already-rendered *content*.

        ``content`` is passed as markup so the view's HTML is not escaped
        a second time.
        """
        context = {**data, "content": Markup(content)}
        return self.render_file(self.layout_path(layout), context)


class Layout:
    """A page shell built up piece by piece, then rendered.

    Usage::

        layout = self.create_layout("Articles")
        layout.set_content(self.view("index", articles=articles))
        layout.set_variable("section", "blog")
        return layout.render()
    """

    __slots__ = ("_content", "_renderer", "_title", "_variables")

    def __init__(self, renderer: ViewRenderer, title: str = "") -> None:
        self._renderer = renderer
        self._title = title
        self._content = ""
        self._variables: dict[str, Any] = {}

    def set_content(self, content: str) -> Layout:
        self._content = content
        return self

    def set_title(self, title: str) -> Layout:
        self._title = title
        return self

    def set_variable(self, name: str, value: Any) -> Layout:
        self._variables[name] = value
        return self

    def set_variables(self, variables: Mapping[str, Any]) -> Layout:
        self._variables.update(variables)
        return self

    @property
    def title(self) -> str:
        return self._title

    def render(self) -> str:
        return self._renderer.render_layout(
            self._content, {**self._variables, "title": self._title}
        )
