"""Router — route registration, grouping, matching, and reverse lookup.

Routes are registered during setup into an ordered route table and the
router is frozen before the first request. Matching walks the method's
bucket in registration order; the first template that fully matches
wins, so specific templates must be registered before general ones.

Usage::

    router = Router()
    router.get("/users/{id}", show_user).where("id", r"\\d+").name("show-user")

    def api(r: Router) -> None:
        r.get("/ping", ping)

    router.group({"prefix": "/api", "middleware": ["auth"]}, api)

    result = await router.dispatch("GET", "/users/42")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from typing import Any

from waypoint._internal.types import Action, MiddlewareRef
from waypoint.config import DEFAULT_PARAM_PATTERN
from waypoint.errors import ConfigurationError, MethodNotAllowed, NotFound
from waypoint.middleware.chain import resolve_middleware
from waypoint.routing import dispatch as dispatcher
from waypoint.routing.actions import ControllerRegistry
from waypoint.routing.pattern import compile_pattern, fill_template
from waypoint.routing.route import GroupScope, RouteMatch, RouteRecord
from waypoint.routing.table import RouteTable

logger = logging.getLogger("waypoint.routing")


class RouteHandle:
    """Reference to a just-registered route.

    Returned by ``add_route`` and the verb shortcuts. Every method
    returns the handle, so calls chain in any order::

        router.get("/users/{id}", show).middleware("auth").where("id", r"\\d+").name("user")
    """

    __slots__ = ("_router", "_table", "method", "uri")

    def __init__(self, router: Router, table: RouteTable, method: str, uri: str) -> None:
        self._router = router
        self._table = table
        self.method = method
        self.uri = uri

    def __repr__(self) -> str:
        return f"RouteHandle({self.method} {self.uri!r})"

    @property
    def record(self) -> RouteRecord:
        return self._current()

    def middleware(self, refs: MiddlewareRef | Iterable[MiddlewareRef]) -> RouteHandle:
        """Append middleware after whatever the route already carries."""
        record = self._current()
        resolved = self._router._resolve_middleware(refs)
        self._table.put(replace(record, middleware=(*record.middleware, *resolved)))
        return self

    def name(self, name: str) -> RouteHandle:
        """Name the route for ``url_for``."""
        record = self._current()
        self._table.bind_name(name, self.method, self.uri)
        old = record.name
        self._table.put(replace(record, name=name))
        if old is not None and old != name and not self._table.name_in_use(old, self.uri):
            self._table.unbind_name(old)
        return self

    def where(self, parameter: str, pattern: str) -> RouteHandle:
        """Constrain a placeholder for every method registered at this URI."""
        self._current()
        self._table.add_constraint(self.uri, parameter, pattern)
        return self

    def _current(self) -> RouteRecord:
        router = self._router
        router._check_not_frozen()
        if self._table is not router._table:
            msg = f"Route handle for {self.method} {self.uri!r} used outside the group that created it."
            raise ConfigurationError(msg)
        record = self._table.get(self.method, self.uri)
        if record is None:
            msg = f"No route defined for {self.method} {self.uri!r}."
            raise ConfigurationError(msg)
        return record


class Router:
    """Ordered route table with builder-style registration.

    Mutable during setup. ``freeze()`` (called by ``App`` before the
    first request) makes further registration a ``ConfigurationError``.
    Dispatch only reads, so one frozen router can serve concurrent
    requests.
    """

    __slots__ = (
        "_aliases",
        "_frozen",
        "_scopes",
        "_table",
        "controllers",
        "default_pattern",
    )

    def __init__(
        self,
        *,
        middleware_aliases: Mapping[str, Any] | None = None,
        controllers: ControllerRegistry | None = None,
        default_pattern: str = DEFAULT_PARAM_PATTERN,
    ) -> None:
        self._table = RouteTable()
        self._scopes: list[GroupScope] = []
        self._aliases: dict[str, Any] = dict(middleware_aliases or {})
        self._frozen = False
        self.controllers = controllers or ControllerRegistry()
        self.default_pattern = default_pattern

    # -- Registration --

    def add_route(self, method: str, uri: str, action: Action) -> RouteHandle:
        """Register (or overwrite) the route for *method* + *uri*."""
        self._check_not_frozen()
        method = method.upper()
        record = RouteRecord(
            method=method,
            uri=uri,
            action=action,
            constraints=self._table.constraints_for(uri),
        )
        self._table.put(record)
        logger.debug("Registered %s %s", method, uri)
        return RouteHandle(self, self._table, method, uri)

    def get(self, uri: str, action: Action) -> RouteHandle:
        return self.add_route("GET", uri, action)

    def post(self, uri: str, action: Action) -> RouteHandle:
        return self.add_route("POST", uri, action)

    def put(self, uri: str, action: Action) -> RouteHandle:
        return self.add_route("PUT", uri, action)

    def patch(self, uri: str, action: Action) -> RouteHandle:
        return self.add_route("PATCH", uri, action)

    def delete(self, uri: str, action: Action) -> RouteHandle:
        return self.add_route("DELETE", uri, action)

    def options(self, uri: str, action: Action) -> RouteHandle:
        return self.add_route("OPTIONS", uri, action)

    def head(self, uri: str, action: Action) -> RouteHandle:
        return self.add_route("HEAD", uri, action)

    def route(
        self,
        uri: str,
        *,
        methods: Iterable[str] = ("GET",),
        name: str | None = None,
        middleware: MiddlewareRef | Iterable[MiddlewareRef] | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a route handler via decorator.

        Args:
            uri: URI template. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``("GET",)``.
            name: Optional route name for ``url_for``.
            middleware: Middleware applied to every registered method.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            for method in methods:
                handle = self.add_route(method, uri, func)
                if middleware is not None:
                    handle.middleware(middleware)
                if name is not None:
                    handle.name(name)
            return func

        return decorator

    def register_middleware_alias(self, alias: str, ref: MiddlewareRef) -> None:
        """Make *alias* usable wherever middleware is accepted."""
        self._check_not_frozen()
        self._aliases[alias] = ref

    def register_controller(self, name: str, controller: type) -> None:
        """Make *controller* addressable as ``"name@method"``."""
        self._check_not_frozen()
        self.controllers.register(name, controller)

    def group(
        self,
        attributes: Mapping[str, Any] | None,
        callback: Callable[[Router], Any],
    ) -> None:
        """Register routes sharing a URI prefix and middleware.

        *attributes* may carry ``prefix`` (str) and ``middleware`` (one
        ref or a sequence). Routes registered inside *callback* are
        collected separately, then merged into the enclosing table with
        the prefix prepended and the group middleware ahead of their own.
        Groups nest.
        """
        self._check_not_frozen()
        attributes = attributes or {}
        scope = GroupScope(
            prefix=attributes.get("prefix", "") or "",
            middleware=self._resolve_middleware(attributes.get("middleware")),
        )

        outer = self._table
        inner = RouteTable()
        self._scopes.append(scope)
        self._table = inner
        try:
            callback(self)
        finally:
            self._table = outer
            self._scopes.pop()

        merged = outer.merge(inner, scope)
        logger.debug("Group %r merged %d route(s)", scope.prefix, len(merged))

    @property
    def scope_depth(self) -> int:
        """Number of groups currently open."""
        return len(self._scopes)

    # -- Lifecycle --

    def freeze(self) -> None:
        """Forbid further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify routes after the router is frozen."
            raise ConfigurationError(msg)

    def _resolve_middleware(
        self, refs: MiddlewareRef | Iterable[MiddlewareRef] | None
    ) -> tuple[MiddlewareRef, ...]:
        return resolve_middleware(refs, self._aliases)

    # -- Introspection --

    @property
    def routes(self) -> list[RouteRecord]:
        """All registered routes, grouped by method in registration order."""
        return list(self._table)

    @property
    def names(self) -> Mapping[str, tuple[str, str]]:
        return self._table.names

    # -- Matching --

    def match(self, method: str, path: str) -> RouteMatch:
        """Resolve *method* + *path* to a route.

        Returns a ``RouteMatch`` on success.
        Raises ``MethodNotAllowed`` if no template of *method* matches but
        a template of another method does.
        Raises ``BadRequest`` if a template matches the path's shape but
        a parameter breaks its ``where()`` constraint.
        Raises ``NotFound`` otherwise.
        """
        method = method.upper()
        bucket = self._table.bucket(method)

        for uri, record in bucket.items():
            found = compile_pattern(uri, record.constraints, self.default_pattern).fullmatch(path)
            if found is not None:
                return RouteMatch(route=record, path_params=found.groupdict())

        allowed = frozenset(
            other
            for other in self._table.methods
            if other != method and self._matches_any(other, path)
        )
        if allowed:
            raise MethodNotAllowed(allowed)

        for uri, record in bucket.items():
            found = compile_pattern(uri, None, self.default_pattern).fullmatch(path)
            if found is not None:
                dispatcher.check_constraints(record, found.groupdict())

        raise NotFound(f"No route matches {method} {path!r}")

    def _matches_any(self, method: str, path: str) -> bool:
        return any(
            compile_pattern(uri, record.constraints, self.default_pattern).fullmatch(path)
            for uri, record in self._table.bucket(method).items()
        )

    async def dispatch(self, method: str, path: str, request: Any = None) -> Any:
        """Match, resolve, and run the route for *method* + *path*.

        See ``waypoint.routing.dispatch.dispatch``.
        """
        return await dispatcher.dispatch(self, method, path, request)

    # -- Reverse lookup --

    def url_for(self, name: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """Build a URL for the route named *name*.

        Placeholders are replaced literally with ``str(value)``::

            router.url_for("show-user", {"id": 7})  # "/users/7"
            router.url_for("show-user", id=7)       # same

        Raises ``RouteNotFound`` if no route carries that name.
        """
        template = self._table.uri_for_name(name)
        return fill_template(template, {**(params or {}), **kwargs})
