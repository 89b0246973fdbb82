"""Axium application class.

Mutable during setup (route registration, capabilities, module
activation). Frozen at runtime when ``app.run()`` or ``__call__()`` is
first invoked.
"""

import inspect
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from axium._internal.asgi import Receive, Scope, Send
from axium.config import AppConfig, RouterMode
from axium.log import configure_logging
from axium.middleware.runner import MiddlewareRunner
from axium.modules.loader import ModuleLoader
from axium.modules.registry import ModuleRegistry
from axium.routing.route import Route
from axium.routing.table import MiddlewareList, RouteTable
from axium.server.dispatcher import Dispatcher
from axium.views import View


class App:
    """The axium application.

    Owns everything a running site needs: the route table, the middleware
    capability table, the module registry, and the view renderer. Several
    apps can live in one process without sharing state.

    Usage::

        app = App(AppConfig(router_mode=RouterMode.JSON))
        app.capability("Auth", AuthGuard())
        app.get("/users/{id}", (UserController, "show"), ["Auth::check"])
        with app.grouped("/admin", ["Auth::permission:ADMIN"]):
            app.delete("/users/{id}", (UserController, "destroy"))
        app.loader.load_active_modules()

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread validates and compiles the app
        even if several workers receive their first request at once.
    """

    __slots__ = (
        "_capabilities",
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_loader",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "modules",
        "routes",
        "views",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self.routes = RouteTable()
        self.modules = ModuleRegistry()
        self.views = View(self.config)
        self._capabilities: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._loader: ModuleLoader | None = None
        self._dispatcher: Dispatcher | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    @property
    def mode(self) -> RouterMode:
        """The configured router mode. Raises ``ConfigurationError`` if unset."""
        return self.config.require_mode()

    @property
    def loader(self) -> ModuleLoader:
        """Module loader bound to this app's registry and route table."""
        if self._loader is None:
            self._loader = ModuleLoader(self)
        return self._loader

    # -- Route registration --

    def add_route(
        self,
        method: str,
        uri: str,
        handler: Any,
        middlewares: MiddlewareList = (),
    ) -> Route:
        """Register a route for *method* under the active group context."""
        self._check_not_frozen()
        return self.routes.add_route(method, uri, handler, middlewares)

    def get(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        return self.add_route("GET", uri, handler, middlewares)

    def post(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        return self.add_route("POST", uri, handler, middlewares)

    def put(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        return self.add_route("PUT", uri, handler, middlewares)

    def delete(self, uri: str, handler: Any, middlewares: MiddlewareList = ()) -> Route:
        return self.add_route("DELETE", uri, handler, middlewares)

    def group(
        self,
        prefix: str,
        body: Callable[[], object],
        middlewares: MiddlewareList = (),
    ) -> None:
        """Run *body* with *prefix* and *middlewares* applied to the routes it registers."""
        self._check_not_frozen()
        self.routes.group(prefix, body, middlewares)

    @contextmanager
    def grouped(self, prefix: str, middlewares: MiddlewareList = ()) -> Iterator[None]:
        """``with`` form of ``group()``."""
        self._check_not_frozen()
        with self.routes.grouped(prefix, middlewares):
            yield

    # -- Middleware capabilities --

    def capability(self, name: str, obj: Any) -> None:
        """Expose *obj* to middleware specs as ``name::action``."""
        self._check_not_frozen()
        self._capabilities[name] = obj

    @property
    def capabilities(self) -> dict[str, Any]:
        return dict(self._capabilities)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook run during ASGI lifespan startup (sync or async)."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook run during ASGI lifespan shutdown (sync or async)."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Freeze the app and serve it with pounce."""
        self._ensure_frozen()
        configure_logging(self.config)
        from axium.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._dispatcher is not None
        await self._dispatcher.handle(scope, receive, send)

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol, freezing the app at startup."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def freeze(self) -> None:
        """Validate and freeze now instead of on the first request."""
        self._ensure_frozen()

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # Fails with ConfigurationError when ROUTER_MODE is missing.
        self.config.require_mode()

        runner = MiddlewareRunner(dict(self._capabilities))
        runner.validate(self.routes.middleware_specs())

        self.routes.freeze()
        self._dispatcher = Dispatcher(self.routes, runner, self.config, self.views)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and capabilities before calling app.run()."
            )
            raise RuntimeError(msg)
