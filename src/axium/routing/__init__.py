"""Routing — ordered route table with positional parameter capture.

Routes are registered during startup and scanned in registration order
for each request. The table is frozen before the first dispatch.
"""

from axium.routing.matcher import match_path, normalize_path, parse_path
from axium.routing.route import HandlerRef, PathSegment, Route, RouteMatch
from axium.routing.table import RouteTable

__all__ = [
    "HandlerRef",
    "PathSegment",
    "Route",
    "RouteMatch",
    "RouteTable",
    "match_path",
    "normalize_path",
    "parse_path",
]
