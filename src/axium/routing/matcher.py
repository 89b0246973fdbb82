"""Path pattern matching with positional parameter capture.

A pattern segment written as ``{name}`` captures exactly one concrete
request segment, whatever its content. Everything else is a literal that
must match byte for byte. There are no typed parameters and no
catch-all segments, so two paths can only match when they have the same
number of segments.
"""

import re
from urllib.parse import unquote

from axium.routing.route import PathSegment

_PARAM_TOKEN = re.compile(r"\{\w+\}", re.ASCII)


def is_param_token(segment: str) -> bool:
    """True if *segment* is a single ``{name}`` parameter token."""
    return _PARAM_TOKEN.fullmatch(segment) is not None


def split_path(path: str) -> list[str]:
    """Split a path on ``/`` after trimming leading and trailing slashes.

    The root path splits to ``[""]`` so it still has one segment to
    compare against.
    """
    return path.strip("/").split("/")


def normalize_path(*parts: str) -> str:
    """Join path fragments into ``/a/b`` form.

    Empty fragments and repeated slashes collapse, so
    ``normalize_path("/api/", "//users/")`` is ``"/api/users"`` and
    ``normalize_path("", "/")`` is ``"/"``.
    """
    segments = [seg for part in parts for seg in part.split("/") if seg]
    return "/" + "/".join(segments)


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"      -> [PathSegment("users")]
        "/users/{id}" -> [PathSegment("users"), PathSegment("{id}", is_param=True, param_name="id")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if is_param_token(part):
            segments.append(PathSegment(value=part, is_param=True, param_name=part[1:-1]))
        else:
            segments.append(PathSegment(value=part))
    return segments


def match_path(pattern: str, path: str) -> tuple[bool, list[str]]:
    """Compare a route *pattern* against a concrete request *path*.

    *path* may carry percent escapes: it is split on literal slashes first
    and each segment is decoded afterwards, so ``/files/a%2Fb`` has two
    segments and captures ``"a/b"``.

    Returns ``(True, params)`` with one captured value per parameter token,
    in left-to-right order, or ``(False, [])``. Nothing outside the return
    value is touched, so a failed attempt never leaks partial captures.
    """
    pattern_parts = split_path(pattern)
    request_parts = split_path(path)

    if len(pattern_parts) != len(request_parts):
        return False, []

    params: list[str] = []
    for expected, raw in zip(pattern_parts, request_parts, strict=True):
        actual = unquote(raw)
        if is_param_token(expected):
            params.append(actual)
        elif expected != actual:
            return False, []
    return True, params
