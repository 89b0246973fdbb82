"""Axium — request routing and module composition for web applications.

Basic usage::

    from axium import App, AppConfig, RouterMode

    class UserController:
        def show(self, user_id):
            return {"id": user_id}

    app = App(AppConfig(router_mode=RouterMode.JSON))
    app.get("/users/{id}", (UserController, "show"))

    app.run()

Modules are folders with a ``manifest.json``; activate them through
``app.loader.load_active_modules()`` before the first request.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "AxiumError",
    "ConfigurationError",
    "DependencyOrder",
    "HTTPError",
    "LoggerService",
    "MalformedRequestError",
    "ManifestError",
    "MiddlewareConfigError",
    "ModuleLoader",
    "NotFound",
    "Request",
    "Response",
    "RouterMode",
    "View",
    "get_request",
    "respond",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import axium`` fast while providing a clean top-level API.
    """
    if name == "App":
        from axium.app import App

        return App

    if name in ("AppConfig", "DependencyOrder", "RouterMode"):
        from axium import config as _config

        return getattr(_config, name)

    if name == "Request":
        from axium.http.request import Request

        return Request

    if name == "Response":
        from axium.http.response import Response

        return Response

    if name == "ModuleLoader":
        from axium.modules.loader import ModuleLoader

        return ModuleLoader

    if name == "View":
        from axium.views import View

        return View

    if name == "LoggerService":
        from axium.log import LoggerService

        return LoggerService

    if name in ("get_request", "respond"):
        from axium import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "AxiumError",
        "ConfigurationError",
        "HTTPError",
        "MalformedRequestError",
        "ManifestError",
        "MiddlewareConfigError",
        "NotFound",
    ):
        from axium import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
