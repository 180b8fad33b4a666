"""URI template compilation.

Turns ``/users/{id}/posts/{slug}`` into an anchored regular expression
with one named group per placeholder::

    compile_pattern("/users/{id}", {"id": r"\\d+"})
    # re.compile(r"/users/(?P<id>\\d+)")  -- used with fullmatch()

Placeholders without a constraint use the default "no slash" pattern.
Literal text between placeholders is escaped, so a ``.`` in a template
only ever matches a dot.
"""

import re
from collections.abc import Mapping
from functools import lru_cache

from waypoint.config import DEFAULT_PARAM_PATTERN
from waypoint.errors import ConfigurationError

PLACEHOLDER = re.compile(r"\{(\w+)\}")


def placeholder_names(template: str) -> list[str]:
    """Return the placeholder names of *template* in declaration order."""
    return PLACEHOLDER.findall(template)


def compile_pattern(
    template: str,
    constraints: Mapping[str, str] | None = None,
    default: str = DEFAULT_PARAM_PATTERN,
) -> re.Pattern[str]:
    """Compile a URI template into a full-match expression.

    Results are cached per (template, constraints, default), so the
    dispatcher can call this on every request without recompiling.

    Raises ``ConfigurationError`` if a constraint pattern is not a valid
    regular expression or a placeholder name repeats.
    """
    items = tuple(sorted(constraints.items())) if constraints else ()
    return _compile(template, items, default)


@lru_cache(maxsize=1024)
def _compile(
    template: str,
    constraints: tuple[tuple[str, str], ...],
    default: str,
) -> re.Pattern[str]:
    lookup = dict(constraints)
    parts: list[str] = []
    position = 0
    for match in PLACEHOLDER.finditer(template):
        parts.append(re.escape(template[position : match.start()]))
        name = match.group(1)
        parts.append(f"(?P<{name}>{lookup.get(name, default)})")
        position = match.end()
    parts.append(re.escape(template[position:]))

    source = "".join(parts)
    try:
        return re.compile(source)
    except re.error as exc:
        msg = f"Route {template!r} compiles to an invalid pattern {source!r}: {exc}"
        raise ConfigurationError(msg) from exc


def fill_template(template: str, params: Mapping[str, object]) -> str:
    """Substitute ``{name}`` placeholders with ``str(value)``.

    Literal replacement only: values are not URL-encoded, and
    placeholders without a value are left in place.
    """
    url = template
    for name, value in params.items():
        url = url.replace(f"{{{name}}}", str(value))
    return url
