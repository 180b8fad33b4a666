"""Error classification for waypoint requests.

Maps a failure raised during dispatch to an HTTP status, a canned
message, and a rendered error page. Single place where an internal
failure becomes something a client sees. Always logs before rendering,
never retries.
"""

import logging
from dataclasses import dataclass
from typing import Any

from waypoint.errors import HTTPError
from waypoint.http.response import Response
from waypoint.server.pages import ErrorPageRenderer

logger = logging.getLogger("waypoint.server")

INTERNAL_ERROR = 500

STATUS_MESSAGES: dict[int, str] = {
    400: "The request could not be understood by the server.",
    401: "You are not authorized to access this resource.",
    403: "You do not have permission to access this resource.",
    404: "The requested resource was not found.",
    405: "The method is not allowed for this resource.",
    429: "Too many requests. Please slow down and try again later.",
    INTERNAL_ERROR: "An internal server error occurred.",
}


@dataclass(frozen=True, slots=True)
class ErrorPage:
    """Outcome of classifying a failure.

    ``failure`` is only set for internal errors, where the renderer may
    show it for diagnosis.
    """

    status: int
    message: str
    failure: BaseException | None = None
    headers: tuple[tuple[str, str], ...] = ()


def classify(exc: BaseException) -> ErrorPage:
    """Pick the error page for *exc*.

    ``HTTPError`` subclasses carry their own status. Anything else, and
    any status without a dedicated page, is an internal error.
    """
    status = exc.status if isinstance(exc, HTTPError) else INTERNAL_ERROR
    if status == INTERNAL_ERROR or status not in STATUS_MESSAGES:
        return ErrorPage(INTERNAL_ERROR, STATUS_MESSAGES[INTERNAL_ERROR], failure=exc)
    headers = exc.headers if isinstance(exc, HTTPError) else ()
    return ErrorPage(status, STATUS_MESSAGES[status], headers=headers)


class ErrorClassifier:
    """Log a failure and turn it into an error ``Response``."""

    __slots__ = ("renderer",)

    def __init__(self, renderer: ErrorPageRenderer) -> None:
        self.renderer = renderer

    def handle(self, exc: BaseException, request: Any = None) -> Response:
        page = classify(exc)
        method = getattr(request, "method", "-")
        path = getattr(request, "path", "-")

        if page.status == INTERNAL_ERROR:
            logger.error("500 %s %s", method, path, exc_info=exc)
        else:
            logger.info("%d %s %s: %s", page.status, method, path, exc)

        body = self.renderer.render_error_page(page.status, page.message, page.failure)
        response = Response(body=body, status=page.status)
        for name, value in page.headers:
            response = response.with_header(name, value)
        return response
