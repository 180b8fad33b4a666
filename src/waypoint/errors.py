"""waypoint exception hierarchy.

Shared across Router, dispatcher, middleware, and App so every module
raises and catches the same types.
"""

from collections.abc import Mapping
from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when routing configuration is invalid.

    Programmer errors: unknown middleware aliases, malformed constraint
    patterns, invalid action shapes. Raised during route definition
    where possible, otherwise on the request that first touches the
    broken piece. Never turned into a 4xx.
    """


class RouteNotFound(WaypointError):  # noqa: N818
    """Raised by ``url_for`` when no route carries the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No route named {name!r}")


@dataclass(frozen=True, slots=True)
class HTTPError(WaypointError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher, middleware, or actions. ``App.handle``
    catches these and hands them to the error classifier.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the path matched a route but a parameter broke its constraint."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class Unauthorized(HTTPError):  # noqa: N818
    """401 — authentication required."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status=401, detail=detail)


class Forbidden(HTTPError):  # noqa: N818
    """403 — authenticated but not allowed."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path, for any method."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — the path matches a route registered under another method.

    Includes an ``Allow`` header listing the valid methods and embeds
    the allowed methods in the detail string.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class TooManyRequests(HTTPError):  # noqa: N818
    """429 — rate limit exceeded."""

    def __init__(self, detail: str = "Too Many Requests") -> None:
        super().__init__(status=429, detail=detail)


class InternalServerError(HTTPError):
    """500 — raised explicitly when an action wants a plain server error."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)


class ValidationFailed(BadRequest):
    """400 — request body or query validation failed.

    Carries the field -> message mapping produced by the validator::

        raise ValidationFailed({"email": "is required"})
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        object.__setattr__(self, "errors", dict(errors))
        detail = "; ".join(
            f"Validation failed for field {field!r}: {message}"
            for field, message in self.errors.items()
        )
        super().__init__(detail or "Validation failed")
