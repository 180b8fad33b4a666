"""waypoint application class.

Explicit application context: owns the configuration, the router, and
the error classifier. Mutable during setup (route registration), frozen
when the first request is handled.
"""

import threading
from collections.abc import Callable, Mapping
from typing import Any

from waypoint.config import AppConfig
from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.routing.actions import ControllerRegistry
from waypoint.routing.router import Router
from waypoint.server.errors import ErrorClassifier
from waypoint.server.negotiation import negotiate
from waypoint.server.pages import ErrorPageRenderer, TemplateErrorPageRenderer


class App:
    """The waypoint application.

    Usage::

        app = App(AppConfig(middleware={"auth": RequireLogin}))

        @app.route("/users/{id}", name="show-user")
        def show_user(id: str):
            return {"id": id}

        response = await app.handle("GET", "/users/7")

    Thread safety:
        Route definition is single-threaded bootstrap. The freeze
        transition uses a Lock + double-check so exactly one thread
        freezes the router, even if several requests arrive at once.
        ``reload()`` swaps the whole router; in-flight requests keep the
        router they started with.
    """

    __slots__ = (
        "_classifier",
        "_freeze_lock",
        "_frozen",
        "config",
        "renderer",
        "router",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        router: Router | None = None,
        renderer: ErrorPageRenderer | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.router: Router = router or self.build_router()
        self.renderer: ErrorPageRenderer = renderer or TemplateErrorPageRenderer.from_config(
            self.config
        )
        self._classifier = ErrorClassifier(self.renderer)
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    def build_router(self) -> Router:
        """Create an empty router wired to this app's configuration."""
        return Router(
            middleware_aliases=self.config.middleware,
            controllers=ControllerRegistry(
                self.config.controllers,
                namespace=self.config.controller_namespace,
            ),
            default_pattern=self.config.default_pattern,
        )

    # -- Route registration --

    def route(self, uri: str, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator shortcut for ``app.router.route``."""
        return self.router.route(uri, **kwargs)

    def group(self, attributes: Mapping[str, Any] | None, callback: Callable[[Router], Any]) -> None:
        """Shortcut for ``app.router.group``."""
        self.router.group(attributes, callback)

    def url_for(self, name: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        return self.router.url_for(name, params, **kwargs)

    # -- Request handling --

    async def handle(self, method: str, path: str, request: Any = None) -> Response:
        """Dispatch one request and always return a ``Response``.

        Failures from matching, middleware, or the action are handed to
        the error classifier, which logs them and renders the error page.
        """
        self._ensure_frozen()
        router = self.router
        if request is None:
            request = Request(method=method.upper(), path=path)

        try:
            result = await router.dispatch(method, path, request)
            return negotiate(result)
        except Exception as exc:
            return self._classifier.handle(exc, request)

    def reload(self, router: Router) -> None:
        """Replace the route table atomically (hot reload)."""
        router.freeze()
        self.router = router

    # -- Freezing --

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self.router.freeze()
            self._frozen = True
