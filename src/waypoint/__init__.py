"""waypoint — request routing core for Python web applications.

Maps a method and path to an action, wraps it in middleware, enforces
parameter constraints, and turns failures into status-coded error pages.

Basic usage::

    from waypoint import App

    app = App()

    @app.route("/users/{id}", name="show-user")
    def show_user(id: str):
        return {"id": id}

    response = await app.handle("GET", "/users/7")
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "Forbidden",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "RouteHandle",
    "RouteNotFound",
    "Router",
    "TooManyRequests",
    "Unauthorized",
    "ValidationFailed",
    "WaypointError",
]

_ERRORS = (
    "BadRequest",
    "ConfigurationError",
    "Forbidden",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "RouteNotFound",
    "TooManyRequests",
    "Unauthorized",
    "ValidationFailed",
    "WaypointError",
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast (kida is only imported with ``App``).
    """
    if name == "App":
        from waypoint.app import App

        return App

    if name == "AppConfig":
        from waypoint.config import AppConfig

        return AppConfig

    if name in ("Router", "RouteHandle"):
        from waypoint.routing import router as _router

        return getattr(_router, name)

    if name == "Request":
        from waypoint.http.request import Request

        return Request

    if name == "Response":
        from waypoint.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from waypoint.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in _ERRORS:
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
