"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_PARAM_PATTERN = r"[^/]+"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            debug=True,
            middleware={"auth": "myapp.middleware:RequireLogin"},
            controllers={"UserController": UserController},
        )
    """

    debug: bool = False

    # Middleware aliases: alias -> class, callable, or "module:Name" string
    middleware: Mapping[str, Any] = field(default_factory=dict)

    # Controllers addressable from "Controller@method" actions
    controllers: Mapping[str, type] = field(default_factory=dict)
    # Module searched for controllers missing from the registry
    controller_namespace: str | None = None

    # Placeholder pattern used when a parameter has no where() constraint
    default_pattern: str = DEFAULT_PARAM_PATTERN

    # Error pages
    template_dir: str | Path | None = None
    error_template: str | None = None  # Template name inside template_dir
    autoescape: bool = True

