"""Request-scoped context via ContextVar.

Provides:
- ``get_request()``: the ``Request`` being dispatched in this task.
- ``respond()``: lets a middleware guard hand the dispatcher the response
  to emit when it vetoes a request.

Both are set by the dispatcher and reset after each request. Accessing
them outside a dispatch raises ``LookupError``.
"""

from contextvars import ContextVar

from axium.http.request import Request
from axium.http.response import Response

request_var: ContextVar[Request] = ContextVar("axium_request")
"""The current request. Set by the dispatcher before the route scan."""

veto_response_var: ContextVar[Response | None] = ContextVar("axium_veto_response", default=None)
"""Response recorded by a guard through ``respond()``."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def respond(response: Response) -> None:
    """Record the response to send if the calling guard vetoes the request.

    Usage::

        class Auth:
            @staticmethod
            def check() -> bool:
                if "authorization" not in get_request().headers:
                    respond(Response.json({"success": False}, status=401))
                    return False
                return True
    """
    request_var.get()
    veto_response_var.set(response)
