"""Tests for perch.cli: argument parsing, make:module, routes and run."""

import pytest

from perch.app import App
from perch.cli import main
from perch.cli._make_module import _snake
from perch.cli._resolve import resolve_app
from perch.config import AppConfig

ROUTES_APP = '''
from perch import App

app = App()
app.router.get("/articles/{id}", "ArticleController@show", "Blog")
app.router.post("/articles", "ArticleController@store", "Blog")


@app.route("/health")
def health(ctx):
    return "ok"


def create_app():
    return app


not_an_app = 42
'''


class TestMain:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "make:module" in capsys.readouterr().out

    def test_resource_and_minimal_are_exclusive(self, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["make:module", "Blog", "--resource", "--minimal", "--path", str(tmp_path)])
        assert exc_info.value.code == 2


class TestMakeModule:
    def test_default_layout(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["make:module", "blog", "--path", str(tmp_path)])
        module = tmp_path / "Modules" / "Blog"
        assert (tmp_path / "Modules" / "__init__.py").is_file()
        assert (module / "__init__.py").is_file()
        assert (module / "Controllers" / "__init__.py").is_file()
        assert (module / "Models" / "__init__.py").is_file()
        assert (module / "Views" / "index.html").is_file()
        assert (module / "Views" / "show.html").is_file()
        assert not (module / "Views" / "edit.html").exists()
        assert not (module / "Models" / "blog_model.py").exists()

        controller = (module / "Controllers" / "blog_controller.py").read_text()
        assert "class BlogController(Controller):" in controller
        assert "def show(self, id):" in controller

        router = (module / "router.py").read_text()
        assert 'router.get("/blog/{id}", "BlogController@show", module)' in router
        assert "Created module 'Blog'" in capsys.readouterr().out

    def test_resource(self, tmp_path) -> None:
        main(["make:module", "Post", "--resource", "--path", str(tmp_path)])
        module = tmp_path / "Modules" / "Post"
        for view in ("index", "show", "create", "edit"):
            assert (module / "Views" / f"{view}.html").is_file()
        assert 'router.resource("post", "PostController", module)' in (
            module / "router.py"
        ).read_text()
        model = (module / "Models" / "post_model.py").read_text()
        assert "class PostModel:" in model
        assert 'table: ClassVar[str] = "posts"' in model
        controller = (module / "Controllers" / "post_controller.py").read_text()
        assert "from ..Models.post_model import PostModel" in controller
        for action in ("index", "create", "store", "show", "edit", "update", "destroy"):
            assert f"def {action}(self" in controller

    def test_minimal(self, tmp_path) -> None:
        main(["make:module", "Ping", "--minimal", "--path", str(tmp_path)])
        module = tmp_path / "Modules" / "Ping"
        assert [p.name for p in (module / "Views").iterdir()] == ["index.html"]
        assert "def show" not in (module / "Controllers" / "ping_controller.py").read_text()

    def test_model_and_controller_name(self, tmp_path) -> None:
        main(
            [
                "make:module",
                "Shop",
                "--model",
                "--controller",
                "StoreController",
                "--path",
                str(tmp_path),
            ]
        )
        module = tmp_path / "Modules" / "Shop"
        assert (module / "Controllers" / "store_controller.py").is_file()
        assert (module / "Models" / "shop_model.py").is_file()
        assert '"StoreController@index"' in (module / "router.py").read_text()

    def test_views_keep_template_syntax(self, tmp_path) -> None:
        main(["make:module", "Blog", "--resource", "--path", str(tmp_path)])
        views = tmp_path / "Modules" / "Blog" / "Views"
        assert "{% for item in items %}" in (views / "index.html").read_text()
        assert 'action="/blog/{{ id }}"' in (views / "edit.html").read_text()

    def test_existing_module_refused(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["make:module", "Blog", "--path", str(tmp_path)])
        with pytest.raises(SystemExit) as exc_info:
            main(["make:module", "Blog", "--path", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "already exists" in capsys.readouterr().err

    def test_force_overwrites(self, tmp_path) -> None:
        main(["make:module", "Blog", "--path", str(tmp_path)])
        router = tmp_path / "Modules" / "Blog" / "router.py"
        router.write_text("# edited\n")
        main(["make:module", "Blog", "--force", "--path", str(tmp_path)])
        assert "register" in router.read_text()

    def test_invalid_name(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["make:module", "my-blog", "--path", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "identifier" in capsys.readouterr().err

    def test_generated_module_is_discoverable(self, app_package) -> None:
        root = app_package("scaffolded", {})
        main(["make:module", "Blog", "--resource", "--path", str(root)])
        app = App(AppConfig(namespace="scaffolded"))
        app._ensure_frozen()
        assert len(app.router) == 7
        assert "scaffolded.Modules.Blog.Controllers.BlogController" in app.controllers

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("BlogController", "blog_controller"), ("PostModel", "post_model"), ("A", "a")],
    )
    def test_snake(self, name: str, expected: str) -> None:
        assert _snake(name) == expected


class TestResolveApp:
    def test_attribute(self, app_package) -> None:
        app_package("routesapp", {"main.py": ROUTES_APP})
        assert isinstance(resolve_app("routesapp.main:app"), App)

    def test_default_attribute(self, app_package) -> None:
        app_package("routesapp2", {"main.py": ROUTES_APP})
        assert isinstance(resolve_app("routesapp2.main"), App)

    def test_factory(self, app_package) -> None:
        app_package("routesapp3", {"main.py": ROUTES_APP})
        assert isinstance(resolve_app("routesapp3.main:create_app"), App)

    def test_not_an_app(self, app_package) -> None:
        app_package("routesapp4", {"main.py": ROUTES_APP})
        with pytest.raises(TypeError, match="not a perch.App"):
            resolve_app("routesapp4.main:not_an_app")


class TestRoutesCommand:
    def test_table(self, app_package, capsys: pytest.CaptureFixture[str]) -> None:
        app_package("routescli", {"main.py": ROUTES_APP})
        main(["routes", "routescli.main:app"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["METHOD", "PATH", "HANDLER", "MODULE"]
        rows = [line.split() for line in lines[2:]]
        assert rows == [
            ["GET", "/articles/{id}", "ArticleController@show", "Blog"],
            ["POST", "/articles", "ArticleController@store", "Blog"],
            ["GET", "/health", "health", "-"],
        ]

    def test_bad_import(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", "no_such_module_xyz:app"])
        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().err


class TestRunCommand:
    def test_starts_dev_server(self, app_package, monkeypatch: pytest.MonkeyPatch) -> None:
        app_package("runcli", {"main.py": ROUTES_APP})
        calls = []

        def fake_run(app, host, port, *, reload=False, app_path=None):
            calls.append((type(app).__name__, host, port, reload, app_path))

        monkeypatch.setattr("perch.server.dev.run_dev_server", fake_run)
        main(["run", "runcli.main:app", "--port", "9000"])
        assert calls == [("App", "127.0.0.1", 9000, False, "runcli.main:app")]
