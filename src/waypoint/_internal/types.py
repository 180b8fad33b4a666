"""Shared type aliases used across waypoint modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route action: callable, (controller, method) pair, or "Controller@method"
Action: TypeAlias = Callable[..., Any] | tuple[Any, str] | str

# Middleware reference: alias string, dotted import path, class, or callable
MiddlewareRef: TypeAlias = str | type | Callable[..., Any]
