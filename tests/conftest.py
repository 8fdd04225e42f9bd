"""Shared fixtures: an on-disk application tree with modules and views."""

import importlib
import sys
from pathlib import Path

import pytest


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def views_root(tmp_path: Path) -> Path:
    """A root with a shared layout and views for the Blog module."""
    write(
        tmp_path / "templates" / "layout.html",
        "<title>{{ title }}</title><main>{{ content }}</main>",
    )
    write(tmp_path / "templates" / "plain.html", "[{{ content }}]")
    write(tmp_path / "Modules" / "Blog" / "Views" / "index.html", "<p>{{ name }}</p>")
    write(tmp_path / "Modules" / "Shop" / "Views" / "cart.html", "cart:{{ count }}")
    write(tmp_path / "emails" / "welcome.html", "Welcome {{ name }}")
    return tmp_path


@pytest.fixture
def app_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Create an importable ``<namespace>`` package on disk.

    Returns a builder ``make(namespace, files)`` where *files* maps paths
    relative to the package directory to their source.
    """
    monkeypatch.syspath_prepend(str(tmp_path))
    created: list[str] = []

    def make(namespace: str, files: dict[str, str]) -> Path:
        root = tmp_path / namespace
        write(root / "__init__.py", "")
        for rel, source in files.items():
            write(root / rel, source)
        created.append(namespace)
        importlib.invalidate_caches()
        return root

    yield make

    for name in list(sys.modules):
        if any(name == ns or name.startswith(ns + ".") for ns in created):
            del sys.modules[name]
