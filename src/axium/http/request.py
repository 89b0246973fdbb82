"""Immutable HTTP request.

Frozen metadata with async body access. Handlers and middleware guards
reach the current request through ``axium.context.get_request()``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qs, quote

if TYPE_CHECKING:
    from axium._internal.asgi import Receive
    from axium.http.forms import FormData

FORM_CONTENT_TYPES: frozenset[str] = frozenset(
    {"application/x-www-form-urlencoded", "multipart/form-data"}
)


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``method`` is the effective method: the dispatcher replaces it with
    the ``_method`` override of a POST form before the route scan.
    ``params`` are the positional values captured by the matched route;
    ``path_params`` holds the same values keyed by token name.

    ``path`` is percent-decoded; ``raw_path`` keeps the escapes as sent, so
    route matching can tell an encoded ``%2F`` from a segment separator.
    ``headers`` maps lower-cased names to values, repeated headers joined
    with ``", "``.
    """

    method: str
    path: str
    headers: Mapping[str, str]
    raw_path: str = ""
    query_string: bytes = b""
    params: tuple[str, ...] = ()
    path_params: Mapping[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: mutable cache for body and parsed form data
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Value of header *name*, matched ignoring case."""
        return self.headers.get(name.lower(), default)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def is_form(self) -> bool:
        """True if the body is URL-encoded or multipart form data."""
        ct = (self.content_type or "").split(";")[0].strip().lower()
        return ct in FORM_CONTENT_TYPES

    @property
    def query(self) -> Mapping[str, str]:
        """Query string parameters (first value per key)."""
        parsed = parse_qs(self.query_string.decode("latin-1"), keep_blank_values=True)
        return MappingProxyType({key: values[0] for key, values in parsed.items()})

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self._stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def _stream(self) -> AsyncGenerator[bytes]:
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    async def form(self) -> FormData:
        """Parse the body as form data (URL-encoded or multipart).

        Result is cached, so the dispatcher's ``_method`` check and the
        handler share one parse.
        """
        if "_form" in self._cache:
            return self._cache["_form"]

        from axium.http.forms import parse_form_data

        ct = self.content_type or "application/x-www-form-urlencoded"
        raw = await self.body()
        result = parse_form_data(raw, ct)
        self._cache["_form"] = result
        return result

    # -- Derivation --

    def with_route(self, method: str, params: tuple[str, ...], names: tuple[str, ...]) -> Request:
        """Return a copy bound to a matched route, sharing the body cache."""
        return replace(
            self,
            method=method,
            params=params,
            path_params=dict(zip(names, params, strict=False)),
        )

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        raw_path = scope.get("raw_path")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            raw_path=raw_path.decode("latin-1") if raw_path else quote(scope["path"]),
            headers=_header_map(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            client=tuple(client) if client else None,
            _receive=receive,
        )


def _header_map(raw: Iterable[tuple[bytes, bytes]]) -> Mapping[str, str]:
    headers: dict[str, str] = {}
    for name, value in raw:
        key = name.decode("latin-1").lower()
        text = value.decode("latin-1")
        headers[key] = f"{headers[key]}, {text}" if key in headers else text
    return MappingProxyType(headers)
