"""Middleware protocol and Next type alias.

A middleware is anything exposing::

    def handle(self, request, next: Next) -> Any: ...

``handle`` may be sync or async. ``next`` is always async: awaiting it
runs the rest of the chain and returns its result. No base class
required. The chain checks the shape, not the lineage.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

# The rest of the chain, as seen from inside one middleware
type Next = Callable[[Any], Awaitable[Any]]


@runtime_checkable
class Middleware(Protocol):
    """Protocol for waypoint middleware.

    Class middleware is instantiated with no arguments per request::

        class Timing:
            async def handle(self, request, next: Next):
                start = time.monotonic()
                response = await next(request)
                elapsed = time.monotonic() - start
                return response.with_header("X-Time", f"{elapsed:.3f}")

    Inline middleware can be a plain function with the same signature
    as ``handle``::

        async def require_json(request, next: Next):
            if request.header("content-type") != "application/json":
                raise BadRequest("JSON body required")
            return await next(request)
    """

    def handle(self, request: Any, next: Next) -> Any: ...
