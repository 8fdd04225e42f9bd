"""Perch CLI: module scaffolding, route listing and the dev server.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Perch: a modular MVC web framework.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- perch make:module ------------------------------------------------
    make_parser = subparsers.add_parser("make:module", help="Scaffold a new module")
    make_parser.add_argument("name", help="Module name (e.g. Blog)")
    make_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite files of an existing module",
    )
    make_parser.add_argument(
        "--model",
        action="store_true",
        help="Also generate a model class",
    )
    make_parser.add_argument(
        "--controller",
        default=None,
        help="Controller class name (default: <Name>Controller)",
    )
    flavour = make_parser.add_mutually_exclusive_group()
    flavour.add_argument(
        "--resource",
        action="store_true",
        help="Generate CRUD actions, views and a model",
    )
    flavour.add_argument(
        "--minimal",
        action="store_true",
        help="Generate a single index action and view",
    )
    make_parser.add_argument(
        "--path",
        default=".",
        help="Application package directory holding Modules/ (default: .)",
    )

    # -- perch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. blog.main:app)")

    # -- perch run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the development server")
    run_parser.add_argument("app", help="Import string (e.g. blog.main:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "make:module":
        from perch.cli._make_module import make_module

        make_module(args)
    elif args.command == "routes":
        from perch.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from perch.cli._run import run_server

        run_server(args)
