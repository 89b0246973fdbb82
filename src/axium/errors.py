"""Axium exception hierarchy.

Shared across the route table, dispatcher, middleware runner, and module
loader so every module raises and catches the same types.

Startup errors (``ConfigurationError``, ``ManifestError``) propagate out of
``App`` setup and are never recovered. ``HTTPError`` subclasses terminate
only the current dispatch and are rendered as ``{"success": false, ...}``
payloads.
"""

from dataclasses import dataclass


class AxiumError(Exception):
    """Base for all axium-specific errors."""


class ConfigurationError(AxiumError):
    """Raised when a required setting is absent or invalid.

    Typically raised during ``App._freeze()`` or while loading the
    environment, before any request is served.
    """


class ManifestError(AxiumError):
    """Raised when a module cannot be activated.

    Covers a missing module folder, a missing or unparsable
    ``manifest.json``, a version mismatch, a dependency cycle, and a
    route file without a ``register`` function.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(AxiumError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher, middleware guards, or handlers. The ASGI
    entry point catches these and emits a JSON error payload.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Page not found.") -> None:
        super().__init__(status=404, detail=detail)


class MalformedRequestError(HTTPError):
    """A PUT/DELETE body declared as JSON could not be decoded.

    Reported as 500, not 400: clients of the original API observe that
    status and depend on it.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(status=500, detail=detail)


class MiddlewareConfigError(HTTPError, ConfigurationError):
    """A middleware spec string is malformed or names an unknown action.

    Raised at registration or freeze time when the spec can be checked
    up front; raised during dispatch (and rendered as a 500) when a
    runner is handed an unchecked spec.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(status=500, detail=detail)
