"""``perch routes``: list registered routes.

Freezes the app (which loads its modules) and prints every route in
match order.
"""

import argparse
import sys

from perch.cli._resolve import resolve_app


def run_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / PATH / HANDLER / MODULE table for ``args.app``."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    app._ensure_frozen()
    routes = app.router.routes
    if not routes:
        print("No routes registered.")
        return

    rows = [
        (route.method.value, route.pattern, str(route.handler), route.module or "-")
        for route in routes
    ]
    headers = ("METHOD", "PATH", "HANDLER", "MODULE")
    widths = [max(len(headers[i]), *(len(row[i]) for row in rows)) for i in range(3)]

    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    print(fmt.format(*headers))
    print("-" * min(sum(widths) + 6 + max(len(row[3]) for row in rows), 80))
    for row in rows:
        print(fmt.format(*row))
