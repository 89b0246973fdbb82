"""Middleware spec parsing.

Routes name their guards with a compact string::

    "Auth::check"                       -> Auth.check()
    "Auth::permission:ADMIN"            -> Auth.permission("ADMIN")
    "Throttle::limit:60:minute"         -> Throttle.limit("60", "minute")

The capability name is looked up in the app's capability table; the
action is an attribute of the registered object. Arguments are always
strings.
"""

from __future__ import annotations

from dataclasses import dataclass

from axium.errors import MiddlewareConfigError


@dataclass(frozen=True, slots=True)
class MiddlewareSpec:
    """A parsed ``Capability::action:arg1:arg2`` reference."""

    capability: str
    action: str
    args: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> MiddlewareSpec:
        """Parse the textual form.

        Splits on the first ``::``, then splits the remainder on ``:``.
        Raises ``MiddlewareConfigError`` if ``::`` is absent or repeated,
        or either name is empty.
        """
        capability, sep, method_with_args = text.partition("::")
        if not sep:
            msg = f"Invalid middleware format: '{text}'"
            raise MiddlewareConfigError(msg)
        action, *args = method_with_args.split(":")
        if not capability or not action or "::" in method_with_args:
            msg = f"Invalid middleware format: '{text}'"
            raise MiddlewareConfigError(msg)
        return cls(capability, action, tuple(args))

    def __str__(self) -> str:
        return ":".join((f"{self.capability}::{self.action}", *self.args))


def parse_specs(specs: object) -> tuple[MiddlewareSpec, ...]:
    """Coerce a sequence of strings or specs into a tuple of ``MiddlewareSpec``."""
    if isinstance(specs, (str, MiddlewareSpec)):
        specs = (specs,)
    result: list[MiddlewareSpec] = []
    for spec in specs:  # type: ignore[attr-defined]
        if isinstance(spec, MiddlewareSpec):
            result.append(spec)
        elif isinstance(spec, str):
            result.append(MiddlewareSpec.parse(spec))
        else:
            msg = f"Middleware must be a spec string, got {spec!r}"
            raise MiddlewareConfigError(msg)
    return tuple(result)
