"""Route table — per-method ordered buckets plus the named-route index.

Buckets are plain dicts keyed by URI template, so iteration follows
registration order and re-registering a template overwrites the record
in its original position.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import replace

from waypoint.errors import ConfigurationError, RouteNotFound
from waypoint.routing.route import GroupScope, RouteRecord


class RouteTable:
    """Mutable during route definition, read-only once the router freezes.

    Holds three things that travel together when a group collects its
    routes into a temporary table:

    - records, bucketed by method
    - ``where()`` constraints, keyed by URI template
    - the name index (name -> method, URI)
    """

    __slots__ = ("_buckets", "_constraints", "_names")

    def __init__(self) -> None:
        self._buckets: dict[str, dict[str, RouteRecord]] = {}
        self._constraints: dict[str, dict[str, str]] = {}
        self._names: dict[str, tuple[str, str]] = {}

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __iter__(self) -> Iterator[RouteRecord]:
        for bucket in self._buckets.values():
            yield from bucket.values()

    # -- Records --

    def put(self, record: RouteRecord) -> None:
        self._buckets.setdefault(record.method, {})[record.uri] = record

    def get(self, method: str, uri: str) -> RouteRecord | None:
        return self._buckets.get(method, {}).get(uri)

    def bucket(self, method: str) -> Mapping[str, RouteRecord]:
        """Records registered for *method*, in registration order."""
        return self._buckets.get(method, {})

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(self._buckets)

    # -- Constraints --

    def constraints_for(self, uri: str) -> dict[str, str]:
        return dict(self._constraints.get(uri, {}))

    def add_constraint(self, uri: str, parameter: str, pattern: str) -> None:
        """Record a constraint and push it to every record holding *uri*."""
        constraints = self._constraints.setdefault(uri, {})
        constraints[parameter] = pattern
        for bucket in self._buckets.values():
            record = bucket.get(uri)
            if record is not None:
                bucket[uri] = replace(record, constraints=dict(constraints))

    # -- Names --

    def bind_name(self, name: str, method: str, uri: str) -> None:
        """Index *name* -> (method, uri).

        A name may be re-bound to the same template (re-registration)
        but not moved to a different one.
        """
        existing = self._names.get(name)
        if existing is not None and existing[1] != uri:
            msg = f"Route name {name!r} is already used by {existing[0]} {existing[1]!r}"
            raise ConfigurationError(msg)
        self._names[name] = (method, uri)

    def unbind_name(self, name: str) -> None:
        self._names.pop(name, None)

    def name_in_use(self, name: str, uri: str) -> bool:
        """Whether any method's record at *uri* still carries *name*."""
        return any(
            bucket[uri].name == name for bucket in self._buckets.values() if uri in bucket
        )

    def uri_for_name(self, name: str) -> str:
        try:
            return self._names[name][1]
        except KeyError:
            raise RouteNotFound(name) from None

    @property
    def names(self) -> Mapping[str, tuple[str, str]]:
        return dict(self._names)

    # -- Groups --

    def merge(self, other: RouteTable, scope: GroupScope) -> list[RouteRecord]:
        """Fold a group's collected routes into this table.

        Each record gets the scope prefix on its URI and the scope
        middleware ahead of its own. Constraints and names move over
        under the prefixed URI. Returns the merged records.
        """
        prefix = scope.prefix.rstrip("/")
        merged: list[RouteRecord] = []
        for record in other:
            uri = prefix + record.uri
            constraints = other.constraints_for(record.uri)
            self._constraints[uri] = dict(constraints)
            moved = replace(
                record,
                uri=uri,
                constraints=constraints,
                middleware=(*scope.middleware, *record.middleware),
            )
            self.put(moved)
            merged.append(moved)

        for name, (method, uri) in other._names.items():
            self.bind_name(name, method, prefix + uri)
        return merged
