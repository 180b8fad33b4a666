"""``waypoint routes`` — list registered routes.

Resolves an import string to an App and prints every route in dispatch
order with its action, name, and middleware.
"""

import argparse
import sys

from waypoint.cli._resolve import resolve_app
from waypoint.middleware.chain import middleware_label
from waypoint.routing.actions import describe_action
from waypoint.routing.route import RouteRecord

HEADERS = ("METHOD", "PATH", "ACTION", "NAME", "MIDDLEWARE")


def format_rows(routes: list[RouteRecord]) -> list[tuple[str, str, str, str, str]]:
    """One row per route: method, path, action, name, middleware."""
    return [
        (
            route.method,
            route.uri,
            describe_action(route.action),
            route.name or "",
            ", ".join(middleware_label(ref) for ref in route.middleware),
        )
        for route in routes
    ]


def render_table(rows: list[tuple[str, str, str, str, str]]) -> str:
    widths = [
        max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(HEADERS)
    ]
    fmt = "  ".join(f"{{:<{width}}}" for width in widths)
    lines = [fmt.format(*HEADERS).rstrip(), "-" * min(sum(widths) + 8, 80)]
    lines.extend(fmt.format(*row).rstrip() for row in rows)
    return "\n".join(lines)


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a waypoint app."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.router.routes
    if args.method:
        routes = [route for route in routes if route.method == args.method.upper()]

    if not routes:
        print("No routes registered.")
        return

    print(render_table(format_rows(routes)))
