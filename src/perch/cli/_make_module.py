"""``perch make:module``: module scaffolding command.

Creates ``<path>/Modules/<Name>/`` with a controller, a router hook, views
and optionally a model. Three flavours:

- **Default**: ``index`` and ``show`` actions and views
- **Resource** (``--resource``): the seven CRUD actions, ``router.resource``
  and a model
- **Minimal** (``--minimal``): a single ``index`` action and view
"""

import argparse
import re
import sys
from datetime import date
from pathlib import Path

from perch.cli import _templates as tpl


def _snake(name: str) -> str:
    """``BlogController`` -> ``blog_controller``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _write(path: Path, template: str, values: dict[str, str]) -> None:
    path.write_text(template.format(**values), encoding="utf-8")
    print(f"  created {path}")


def make_module(args: argparse.Namespace) -> None:
    """Generate a module under ``<args.path>/Modules/``.

    Refuses to overwrite an existing module unless ``--force`` is given.
    """
    raw = args.name
    if not raw or not raw.isidentifier():
        print(f"Error: module name {raw!r} must be a valid Python identifier", file=sys.stderr)
        raise SystemExit(1)

    module = raw[0].upper() + raw[1:]
    controller = args.controller or f"{module}Controller"
    if not controller.isidentifier():
        print(f"Error: controller name {controller!r} is not a valid identifier", file=sys.stderr)
        raise SystemExit(1)

    modules_dir = Path(args.path) / "Modules"
    module_dir = modules_dir / module
    if module_dir.exists() and not args.force:
        print(f"Error: module '{module}' already exists at {module_dir}", file=sys.stderr)
        print("Use --force to overwrite it.", file=sys.stderr)
        raise SystemExit(1)

    values = {
        "module": module,
        "lower": module.lower(),
        "controller": controller,
        "model": f"{module}Model",
        "model_module": _snake(f"{module}Model"),
        "table": f"{module.lower()}s",
        "date": date.today().isoformat(),
    }

    for sub in ("Controllers", "Models", "Views"):
        (module_dir / sub).mkdir(parents=True, exist_ok=True)
    if not (modules_dir / "__init__.py").exists():
        (modules_dir / "__init__.py").write_text('"""Application modules."""\n', encoding="utf-8")

    _write(module_dir / "__init__.py", tpl.PACKAGE_INIT_PY, values)
    _write(module_dir / "Controllers" / "__init__.py", tpl.CONTROLLERS_INIT_PY, values)
    _write(module_dir / "Models" / "__init__.py", tpl.MODELS_INIT_PY, values)

    if args.minimal:
        controller_tpl, router_tpl = tpl.CONTROLLER_MINIMAL_PY, tpl.ROUTER_MINIMAL_PY
    elif args.resource:
        controller_tpl, router_tpl = tpl.CONTROLLER_RESOURCE_PY, tpl.ROUTER_RESOURCE_PY
    else:
        controller_tpl, router_tpl = tpl.CONTROLLER_PY, tpl.ROUTER_PY

    _write(module_dir / "Controllers" / f"{_snake(controller)}.py", controller_tpl, values)
    _write(module_dir / "router.py", router_tpl, values)

    views = module_dir / "Views"
    if args.minimal:
        _write(views / "index.html", tpl.INDEX_MINIMAL_HTML, values)
    else:
        _write(views / "index.html", tpl.INDEX_HTML, values)
        _write(views / "show.html", tpl.SHOW_HTML, values)
        if args.resource:
            _write(views / "create.html", tpl.CREATE_HTML, values)
            _write(views / "edit.html", tpl.EDIT_HTML, values)

    if args.model or args.resource:
        model_tpl = tpl.MODEL_RESOURCE_PY if args.resource else tpl.MODEL_PY
        _write(module_dir / "Models" / f"{values['model_module']}.py", model_tpl, values)

    print(f"Created module '{module}'")
