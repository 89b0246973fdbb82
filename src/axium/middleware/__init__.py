"""Middleware — named guards referenced from routes by spec string.

A guard is any callable attribute of a registered capability object::

    class Auth:
        @staticmethod
        def check() -> bool:
            return get_request().headers.get("authorization") is not None

    app.capability("Auth", Auth)
    app.get("/me", (ProfileController, "show"), ["Auth::check"])

Returning ``False`` vetoes the request; anything else lets it through.
"""

from axium.middleware.runner import MiddlewareRunner
from axium.middleware.spec import MiddlewareSpec, parse_specs

__all__ = [
    "MiddlewareRunner",
    "MiddlewareSpec",
    "parse_specs",
]
