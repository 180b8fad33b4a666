"""Middleware — Protocol-based, no inheritance required.

A middleware is anything with ``handle(request, next)``, or a plain
function with that signature::

    async def mw(request, next: Next): ...

Attach middleware to routes with ``RouteHandle.middleware()`` or to
whole groups with ``Router.group({"middleware": [...]}, ...)``.
"""

from waypoint.middleware.chain import build_chain, resolve_middleware
from waypoint.middleware.protocol import Middleware, Next

__all__ = [
    "Middleware",
    "Next",
    "build_chain",
    "resolve_middleware",
]
