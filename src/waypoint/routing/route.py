"""RouteRecord, RouteMatch, and GroupScope frozen dataclasses."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from waypoint._internal.types import MiddlewareRef


@dataclass(frozen=True, slots=True)
class RouteRecord:
    """A registered route.

    One record per (method, uri) pair. Records are never mutated; the
    registrar replaces them with ``dataclasses.replace`` copies.
    """

    method: str
    uri: str
    action: Any
    name: str | None = None
    constraints: Mapping[str, str] = field(default_factory=dict)
    middleware: tuple[MiddlewareRef, ...] = ()


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``path_params`` preserves placeholder declaration order.
    """

    route: RouteRecord
    path_params: dict[str, str]


@dataclass(frozen=True, slots=True)
class GroupScope:
    """Snapshot of an open ``group()`` — one per nesting level."""

    prefix: str = ""
    middleware: tuple[MiddlewareRef, ...] = ()
