"""Action resolution — turn a route's action into something callable.

Three shapes are accepted::

    router.get("/", index)                              # any callable
    router.get("/users", (UserController, "index"))     # (controller, method)
    router.get("/users/{id}", "UserController@show")    # "Controller@method"

Controllers are looked up through an explicit registry first, then as a
dotted import path, then inside the configured controller namespace.
A controller is instantiated with no arguments each time its action runs.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from waypoint._internal.imports import import_string, is_import_path
from waypoint.errors import ConfigurationError, NotFound

logger = logging.getLogger("waypoint.routing")


class ControllerRegistry:
    """Name -> controller class lookup."""

    __slots__ = ("_controllers", "namespace")

    def __init__(
        self,
        controllers: Mapping[str, type] | None = None,
        namespace: str | None = None,
    ) -> None:
        self._controllers: dict[str, type] = dict(controllers or {})
        self.namespace = namespace

    def register(self, name: str, controller: type) -> None:
        self._controllers[name] = controller

    def lookup(self, identifier: Any) -> type | None:
        """Return the controller class for *identifier*, or ``None``."""
        if isinstance(identifier, type):
            return identifier
        if not isinstance(identifier, str):
            return None

        controller = self._controllers.get(identifier)
        if controller is not None:
            return controller

        candidates: list[str] = []
        if is_import_path(identifier):
            candidates.append(identifier)
        if self.namespace:
            candidates.append(f"{self.namespace}:{identifier}")

        for path in candidates:
            try:
                found = import_string(path)
            except (ImportError, AttributeError):
                logger.debug("Controller %r not importable from %r", identifier, path)
                continue
            if isinstance(found, type):
                return found
        return None


def resolve_action(action: Any, controllers: ControllerRegistry) -> Callable[..., Any]:
    """Resolve *action* to a callable.

    Raises ``NotFound`` when a controller or its method is missing and
    ``ConfigurationError`` when the action has none of the accepted shapes.
    """
    if callable(action):
        return action

    if isinstance(action, str) and "@" in action:
        controller, _, method = action.rpartition("@")
        return _bind_controller(controller, method, controllers)

    if isinstance(action, (tuple, list)) and len(action) == 2:
        controller, method = action
        return _bind_controller(controller, method, controllers)

    msg = f"Invalid action format: {action!r}"
    raise ConfigurationError(msg)


def _bind_controller(
    identifier: Any,
    method: str,
    controllers: ControllerRegistry,
) -> Callable[..., Any]:
    cls = controllers.lookup(identifier)
    if cls is None or not callable(getattr(cls, method, None)):
        label = identifier.__name__ if isinstance(identifier, type) else identifier
        raise NotFound(f"Controller [{label}] or its method [{method}] not found.")
    return getattr(cls(), method)


def describe_action(action: Any) -> str:
    """Human-readable label for an action (used by ``waypoint routes``)."""
    if isinstance(action, str):
        return action
    if isinstance(action, (tuple, list)) and len(action) == 2:
        controller, method = action
        label = controller.__name__ if isinstance(controller, type) else str(controller)
        return f"{label}@{method}"
    return getattr(action, "__qualname__", None) or getattr(action, "__name__", repr(action))
