"""Middleware runner — ordered guard chain with lazy short-circuit.

The chain is a logical AND: each guard runs in order, and the first one
that returns ``False`` stops the chain. Any other return value (``None``,
``True``, a string...) lets the next guard run.

Guards may be ``def`` or ``async def``; they read the current request
through ``axium.context.get_request()``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from axium._internal.invoke import invoke
from axium.errors import MiddlewareConfigError
from axium.middleware.spec import MiddlewareSpec, parse_specs

logger = logging.getLogger("axium.middleware")


class MiddlewareRunner:
    """Resolves middleware specs against a capability table and runs them.

    Usage::

        runner = MiddlewareRunner({"Auth": AuthGuard})
        ok = await runner.run(["Auth::check", "Auth::permission:ADMIN"])
    """

    __slots__ = ("_capabilities",)

    def __init__(self, capabilities: Mapping[str, Any]) -> None:
        self._capabilities = capabilities

    def resolve(self, spec: MiddlewareSpec) -> Any:
        """Return the callable bound to *spec*.

        Raises ``MiddlewareConfigError`` if the capability or action is
        not registered.
        """
        target = self._capabilities.get(spec.capability)
        if target is None:
            msg = f"Middleware capability '{spec.capability}' is not registered"
            raise MiddlewareConfigError(msg)
        action = getattr(target, spec.action, None)
        if not callable(action):
            msg = f"Method '{spec.action}' does not exist on '{spec.capability}'"
            raise MiddlewareConfigError(msg)
        return action

    def validate(self, specs: Iterable[MiddlewareSpec | str]) -> None:
        """Resolve every spec without running it (startup check)."""
        for spec in parse_specs(specs):
            self.resolve(spec)

    async def run(self, specs: Iterable[MiddlewareSpec | str]) -> bool:
        """Run *specs* in order. Returns False as soon as one guard returns False."""
        for item in specs:
            spec = item if isinstance(item, MiddlewareSpec) else MiddlewareSpec.parse(item)
            action = self.resolve(spec)
            result = await invoke(action, *spec.args)
            if result is False:
                logger.debug("Middleware %s denied the request", spec)
                return False
        return True
