"""``perch run``: development server command."""

import argparse
import logging
import sys

from perch.cli._resolve import resolve_app


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it with the development server.

    Auto-reload follows ``AppConfig.debug``.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=app.config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from perch.server.dev import run_dev_server

    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=app.config.debug,
        app_path=args.app,
    )
