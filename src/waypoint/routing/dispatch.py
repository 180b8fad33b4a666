"""Dispatch — run the route matching a method and path.

Pipeline for one request:

1. ``Router.match`` picks the first route, in registration order, whose
   template fully matches the path (``NotFound`` / ``MethodNotAllowed`` /
   ``BadRequest`` when none does).
2. Constraints are re-checked against the extracted values.
3. The action is resolved to a callable.
4. The route middleware is folded around the action and awaited.

No recovery happens here. Every failure propagates to the caller.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from waypoint._internal.invoke import invoke
from waypoint.errors import BadRequest, ConfigurationError
from waypoint.http.request import Request
from waypoint.middleware.chain import build_chain
from waypoint.routing.actions import resolve_action
from waypoint.routing.pattern import placeholder_names
from waypoint.routing.route import RouteRecord

if TYPE_CHECKING:
    from waypoint.routing.router import Router


def check_constraints(record: RouteRecord, params: Mapping[str, str]) -> None:
    """Raise ``BadRequest`` if a parameter value breaks its constraint.

    Walks the template's placeholders rather than *params* so only
    declared parameters are checked.
    """
    for name in placeholder_names(record.uri):
        pattern = record.constraints.get(name)
        if pattern is None or name not in params:
            continue
        try:
            conforms = re.fullmatch(pattern, params[name]) is not None
        except re.error as exc:
            msg = f"Constraint {pattern!r} on {name!r} for {record.uri!r} is not a valid pattern: {exc}"
            raise ConfigurationError(msg) from exc
        if not conforms:
            raise BadRequest(
                f"Parameter {name!r} with value {params[name]!r} does not match {pattern!r}."
            )


def build_action_kwargs(
    action: Callable[..., Any],
    request: Any,
    path_params: Mapping[str, str],
) -> dict[str, Any]:
    """Bind path parameters to *action* by name.

    A parameter named ``request`` receives the request. Path parameters
    go to parameters of the same name; an action taking ``**kwargs``
    receives all of them.
    """
    try:
        parameters = inspect.signature(action).parameters
    except (TypeError, ValueError):
        return dict(path_params)

    takes_var_kw = any(p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters.values())
    kwargs: dict[str, Any] = {}
    if "request" in parameters:
        kwargs["request"] = request
    for name, value in path_params.items():
        if name in parameters or takes_var_kw:
            kwargs.setdefault(name, value)
    return kwargs


async def dispatch(router: Router, method: str, path: str, request: Any = None) -> Any:
    """Run the route for *method* + *path* and return the action's result.

    *request* is passed through middleware to the action untouched apart
    from its path parameters; a bare ``Request`` is built when omitted.
    """
    match = router.match(method, path)
    check_constraints(match.route, match.path_params)
    action = resolve_action(match.route.action, router.controllers)

    if request is None:
        request = Request(method=method.upper(), path=path)
    if isinstance(request, Request):
        request = request.with_path_params(match.path_params)

    async def terminal(req: Any) -> Any:
        return await invoke(action, **build_action_kwargs(action, req, match.path_params))

    chain = build_chain(match.route.middleware, terminal)
    return await chain(request)
