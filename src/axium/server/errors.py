"""Error responses for the dispatch pipeline.

Maps ``HTTPError`` exceptions, missing routes, and unexpected failures to
``Response`` objects. Routing errors always use the
``{"success": false, "message": ...}`` JSON payload; unexpected failures
follow the router mode and the ``debug`` flag.
"""

import html
import logging
import traceback
from pathlib import Path

from axium.config import RouterMode
from axium.errors import ConfigurationError, HTTPError
from axium.http.request import Request
from axium.http.response import HTML_CONTENT_TYPE, Response, error_payload
from axium.views import View

logger = logging.getLogger("axium.server")

NOT_FOUND_MESSAGE = "Page not found."
INTERNAL_ERROR_MESSAGE = "Internal server error."


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to its JSON payload and status."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    response = error_payload(exc.detail or f"Error {exc.status}", exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def not_found_response(
    mode: RouterMode,
    error_view: str | Path | None,
    views: View,
) -> Response:
    """The terminal response when no route matched.

    JSON mode always answers with the 404 payload. VIEW mode renders the
    configured error view; a missing setting or file is a configuration
    error reported as 500.
    """
    if mode is RouterMode.JSON:
        return error_payload(NOT_FOUND_MESSAGE, 404)

    if error_view is None:
        return error_payload("Setting 'ERROR_404_VIEW' is not defined.", 500)
    path = Path(error_view)
    if not path.is_file():
        return error_payload("File for setting 'ERROR_404_VIEW' was not found.", 500)
    return Response(body=views.render_file(path), status=404)


def handle_internal_error(
    exc: Exception,
    request: Request,
    mode: RouterMode | None,
    debug: bool,
) -> Response:
    """Log an unexpected exception and build a 500 response.

    With ``debug`` on, the message, location and traceback are included.
    """
    frame = traceback.extract_tb(exc.__traceback__)[-1] if exc.__traceback__ else None
    logger.error(
        "Unhandled %s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.path,
        exc,
        exc_info=exc,
        extra={
            "file": frame.filename if frame else None,
            "line": frame.lineno if frame else None,
        },
    )

    if isinstance(exc, ConfigurationError):
        return error_payload(str(exc), 500)

    if mode is RouterMode.VIEW:
        if not debug:
            return Response(body=INTERNAL_ERROR_MESSAGE, status=500)
        return Response(
            body=_debug_html(exc, frame),
            status=500,
            content_type=HTML_CONTENT_TYPE,
        )

    if not debug:
        return Response.json({"error": True, "message": INTERNAL_ERROR_MESSAGE}, status=500)
    return Response.json(
        {
            "error": True,
            "message": str(exc),
            "type": type(exc).__name__,
            "file": frame.filename if frame else None,
            "line": frame.lineno if frame else None,
            "trace": "".join(traceback.format_exception(exc)),
        },
        status=500,
    )


def _debug_html(exc: Exception, frame: traceback.FrameSummary | None) -> str:
    parts = [
        "<h2>Error</h2>",
        f"<p><strong>Message:</strong> {html.escape(str(exc))}</p>",
    ]
    if frame is not None:
        parts.append(f"<p><strong>File:</strong> {html.escape(frame.filename)}</p>")
        parts.append(f"<p><strong>Line:</strong> {frame.lineno}</p>")
    trace = "".join(traceback.format_exception(exc))
    parts.append(f"<pre>{html.escape(trace)}</pre>")
    return "\n".join(parts)
