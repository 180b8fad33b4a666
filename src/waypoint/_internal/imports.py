"""Import-string resolution.

Accepts ``"package.module:Name"`` and ``"package.module.Name"``. Used for
middleware aliases, controller lookup, and the CLI's app resolution.
"""

import importlib
from typing import Any


def import_string(path: str) -> Any:
    """Import the object *path* names.

    Raises ``ImportError`` if the module cannot be imported and
    ``AttributeError`` if the module has no such attribute.
    """
    if ":" in path:
        module_path, _, attr_path = path.partition(":")
    else:
        module_path, _, attr_path = path.rpartition(".")
        if not module_path:
            msg = f"{path!r} is not a dotted import path"
            raise ImportError(msg)

    obj: Any = importlib.import_module(module_path)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


def is_import_path(value: str) -> bool:
    return ":" in value or "." in value
