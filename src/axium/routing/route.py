"""Route, HandlerRef and RouteMatch frozen dataclasses."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from axium.errors import ConfigurationError
from axium.middleware.spec import MiddlewareSpec

HTTP_METHODS: frozenset[str] = frozenset({"GET", "POST", "PUT", "DELETE"})


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Literal:  ``users``  (is_param=False)
    Param:    ``{id}``   (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class HandlerRef:
    """A route target: a (controller type, action name) pair or a callable.

    Controllers are instantiated fresh for every dispatch, then the
    action is looked up on the instance. Plain callables are used as-is.
    """

    target: Any
    action: str | None = None

    @classmethod
    def coerce(cls, handler: Any) -> HandlerRef:
        """Build a HandlerRef from the forms accepted by the registration API.

        Accepts ``(Controller, "action")`` / ``[Controller, "action"]``,
        an existing ``HandlerRef``, or any callable.

        Raises ``ConfigurationError`` if the action does not exist on the
        controller, so a typo fails at startup rather than per request.
        """
        if isinstance(handler, HandlerRef):
            return handler
        if isinstance(handler, (tuple, list)):
            if len(handler) != 2 or not isinstance(handler[1], str):
                msg = f"Handler must be a (controller, action) pair, got {handler!r}"
                raise ConfigurationError(msg)
            controller, action = handler
            if not callable(getattr(controller, action, None)):
                name = getattr(controller, "__name__", repr(controller))
                msg = f"Action '{action}' does not exist on '{name}'"
                raise ConfigurationError(msg)
            return cls(controller, action)
        if callable(handler):
            return cls(handler)
        msg = f"Handler is not callable: {handler!r}"
        raise ConfigurationError(msg)

    def resolve(self) -> Callable[..., Any]:
        """Return the callable for one dispatch."""
        if self.action is None:
            return self.target
        return getattr(self.target(), self.action)

    @property
    def name(self) -> str:
        """Human-readable ``Controller::action`` label for listings."""
        target_name = getattr(self.target, "__qualname__", None) or repr(self.target)
        if self.action is None:
            return target_name
        return f"{target_name}::{self.action}"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``path`` is always stored normalized: one leading slash, no trailing
    slash, no empty internal segments.
    """

    method: str
    path: str
    handler: HandlerRef
    middlewares: tuple[MiddlewareSpec, ...] = ()

    @property
    def param_names(self) -> tuple[str, ...]:
        """Parameter token names in left-to-right pattern order."""
        from axium.routing.matcher import parse_path

        return tuple(
            seg.param_name for seg in parse_path(self.path) if seg.param_name is not None
        )


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route scan."""

    route: Route
    params: tuple[str, ...]

    @property
    def path_params(self) -> dict[str, str]:
        """Captured values keyed by token name."""
        return dict(zip(self.route.param_names, self.params, strict=False))
