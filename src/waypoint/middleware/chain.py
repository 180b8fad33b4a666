"""Middleware resolution and chain composition.

Two phases:

- ``resolve_middleware`` runs at route-definition time. It turns alias
  strings and import paths into classes or callables and fails fast on
  anything it cannot find.
- ``build_chain`` runs per request. It folds the resolved list around the
  terminal handler, last to first, so the first entry is the outermost
  layer. Each layer checks the middleware capability when it runs.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from waypoint._internal.imports import import_string
from waypoint._internal.invoke import invoke
from waypoint._internal.types import MiddlewareRef
from waypoint.errors import ConfigurationError
from waypoint.middleware.protocol import Middleware, Next


def normalize_refs(refs: MiddlewareRef | Iterable[MiddlewareRef] | None) -> list[MiddlewareRef]:
    """Accept a single ref or a sequence of refs."""
    if refs is None:
        return []
    if isinstance(refs, (str, type, Middleware)) or callable(refs):
        return [refs]
    return list(refs)


def resolve_middleware(
    refs: MiddlewareRef | Iterable[MiddlewareRef] | None,
    aliases: Mapping[str, Any],
) -> tuple[MiddlewareRef, ...]:
    """Resolve aliases and import paths to classes or callables.

    Raises ``ConfigurationError`` for an alias that is neither registered
    nor importable, and for any ref that is not a string, class,
    middleware object, or callable.
    """
    resolved: list[MiddlewareRef] = []
    for ref in normalize_refs(refs):
        if isinstance(ref, str):
            resolved.append(_resolve_name(ref, aliases))
        elif isinstance(ref, (type, Middleware)) or callable(ref):
            resolved.append(ref)
        else:
            msg = f"Middleware should be an alias, class, or callable, got {ref!r}"
            raise ConfigurationError(msg)
    return tuple(resolved)


def _resolve_name(name: str, aliases: Mapping[str, Any]) -> MiddlewareRef:
    target = aliases.get(name, name)
    if not isinstance(target, str):
        return target
    try:
        return import_string(target)
    except (ImportError, AttributeError) as exc:
        msg = f"Middleware alias or class [{name}] not defined or does not exist."
        raise ConfigurationError(msg) from exc


def middleware_label(ref: MiddlewareRef) -> str:
    if isinstance(ref, str):
        return ref
    return getattr(ref, "__qualname__", None) or repr(ref)


def _handler_for(ref: MiddlewareRef) -> Any:
    """Return the ``handle(request, next)`` callable for *ref*."""
    if isinstance(ref, type):
        if issubclass(ref, Middleware):
            return ref().handle
    elif isinstance(ref, Middleware):
        return ref.handle
    elif callable(ref):
        return ref

    msg = f"Middleware [{middleware_label(ref)}] does not implement handle(request, next)."
    raise ConfigurationError(msg)


def build_chain(middleware: Sequence[MiddlewareRef], handler: Next) -> Next:
    """Wrap *handler* in *middleware*, first entry outermost."""
    chain = handler
    for ref in reversed(middleware):
        outer = chain

        async def link(request: Any, _ref: MiddlewareRef = ref, _next: Next = outer) -> Any:
            return await invoke(_handler_for(_ref), request, _next)

        chain = link
    return chain
