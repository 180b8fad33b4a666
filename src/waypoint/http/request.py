"""Immutable HTTP request value.

The routing core only reads ``method`` and ``path``; everything else is
carried through untouched for middleware and actions. Building requests
from a server protocol is the host's job.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path_params`` is filled in by the dispatcher once a route matches;
    the request a middleware sees before dispatch has it empty.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)
    path_params: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    # Per-request scratch space for middleware (dict contents are mutable
    # even though the field reference is frozen)
    state: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def with_path_params(self, params: Mapping[str, str]) -> Request:
        """Return a copy carrying the matched path parameters."""
        return replace(self, path_params=dict(params))
