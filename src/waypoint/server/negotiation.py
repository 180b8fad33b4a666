"""Content negotiation — convert action return values to Response.

Dispatch order:

1. ``Response``              -> pass through
2. ``None``                  -> 204, empty body
3. ``str``                   -> 200, text/html
4. ``bytes``                 -> 200, application/octet-stream
5. ``dict`` / ``list``       -> 200, application/json
6. ``(value, int)``          -> negotiate value, override status
7. ``(value, int, dict)``    -> negotiate value, override status + headers
"""

import json
from typing import Any

from waypoint.errors import ConfigurationError
from waypoint.http.response import Response


def negotiate(value: Any) -> Response:
    """Convert an action's return value to a ``Response``."""
    match value:
        case Response():
            return value
        case None:
            return Response(body="", status=204)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json.dumps(value, default=str),
                content_type="application/json",
            )
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Action returned {type(value).__name__}, which cannot be converted "
                "to a Response. Return a Response, str, bytes, dict, list, or tuple."
            )
            raise ConfigurationError(msg)
