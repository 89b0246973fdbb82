"""Request-body extraction for PUT and DELETE dispatch.

PUT and DELETE actions receive the parsed body as their last positional
argument. The body is read once:

- empty body -> ``{}``
- content type containing ``application/json`` -> decoded JSON; a decode
  failure is a ``MalformedRequestError`` and never falls back to form
  parsing
- anything else -> form data (URL-encoded, or multipart when declared)

The ``_method`` override field is routing metadata and is removed from
the result.
"""

import json as json_module
from typing import Any

from axium.errors import MalformedRequestError
from axium.http.request import Request

BODY_METHODS: frozenset[str] = frozenset({"PUT", "DELETE"})
METHOD_OVERRIDE_FIELD = "_method"


async def extract_request_data(request: Request) -> Any:
    """Read and decode the body of a PUT/DELETE request."""
    raw = await request.body()
    if not raw:
        return {}

    content_type = request.content_type or ""
    if "application/json" in content_type:
        try:
            data = json_module.loads(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            msg = f"Failed to decode JSON: {exc}"
            raise MalformedRequestError(msg) from exc
        if data is None:
            data = {}
    else:
        form = await request.form()
        data = form.to_params()

    if isinstance(data, dict):
        data.pop(METHOD_OVERRIDE_FIELD, None)
    return data


async def resolve_method(request: Request) -> str:
    """Return the effective method, honouring a POST form's ``_method`` field."""
    method = request.method.upper()
    if method != "POST" or not request.is_form:
        return method
    form = await request.form()
    override = form.get(METHOD_OVERRIDE_FIELD)
    if override:
        return override.upper()
    return method
