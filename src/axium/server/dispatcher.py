"""Request dispatch: from an ASGI HTTP scope to a sent response.

One dispatch walks a fixed sequence of states::

    RECEIVE_REQUEST -> RESOLVE_METHOD -> EXTRACT_BODY (PUT/DELETE only)
        -> MATCH_ROUTE -> RUN_MIDDLEWARE -> INVOKE_HANDLER
        -> RESPONSE | NOT_FOUND

Routes are scanned in registration order and the first match wins.
Controller actions receive the captured path parameters positionally,
followed by the parsed body map for PUT and DELETE.
"""

import logging
from typing import Any

from axium._internal.asgi import Receive, Scope, Send
from axium._internal.invoke import invoke
from axium.config import AppConfig, RouterMode
from axium.context import request_var, veto_response_var
from axium.errors import HTTPError
from axium.http.body import BODY_METHODS, extract_request_data, resolve_method
from axium.http.request import Request
from axium.http.response import HTML_CONTENT_TYPE, JSON_CONTENT_TYPE, Response
from axium.middleware.runner import MiddlewareRunner
from axium.routing.table import RouteTable
from axium.server.errors import handle_http_error, handle_internal_error, not_found_response
from axium.server.sender import send_response
from axium.views import View

logger = logging.getLogger("axium.server")


class Dispatcher:
    """Resolves requests against a frozen route table and produces responses.

    Built once by ``App._freeze()``; holds only read-only state, so one
    instance serves every request of the process.
    """

    __slots__ = ("_config", "_mode", "_runner", "_table", "_views")

    def __init__(
        self,
        table: RouteTable,
        runner: MiddlewareRunner,
        config: AppConfig,
        views: View,
    ) -> None:
        self._table = table
        self._runner = runner
        self._config = config
        self._mode = config.require_mode()
        self._views = views

    @property
    def mode(self) -> RouterMode:
        return self._mode

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process a single ASGI HTTP request through the full pipeline."""
        request = Request.from_asgi(scope, receive)
        token = request_var.set(request)
        veto_token = veto_response_var.set(None)
        try:
            response = await self.dispatch(request)
        except HTTPError as exc:
            response = handle_http_error(exc, request)
        except Exception as exc:
            response = handle_internal_error(exc, request, self._mode, self._config.debug)
        finally:
            veto_response_var.reset(veto_token)
            request_var.reset(token)

        logger.debug("%s %s -> %d", request.method, request.path, response.status)
        await send_response(response, send)

    async def dispatch(self, request: Request) -> Response:
        """Run one request through method resolution, matching, middleware and handler."""
        method = await resolve_method(request)

        body: Any = None
        if method in BODY_METHODS:
            body = await extract_request_data(request)

        match = self._table.match(method, request.raw_path)
        if match is None:
            return not_found_response(self._mode, self._config.error_404_view, self._views)

        route = match.route
        request_var.set(request.with_route(method, match.params, route.param_names))

        if route.middlewares and not await self._runner.run(route.middlewares):
            vetoed = veto_response_var.get()
            return vetoed if vetoed is not None else Response(body="", status=403)

        action = route.handler.resolve()
        args: list[Any] = list(match.params)
        if method in BODY_METHODS:
            args.append(body)

        result = await invoke(action, *args)
        return self.render_result(result)

    def render_result(self, result: Any) -> Response:
        """Turn an action's return value into a 200 response for the router mode.

        ``Response`` passes through, ``str``/``bytes`` are sent as-is,
        ``dict``/``list`` are JSON-encoded and ``None`` is an empty body.
        """
        if isinstance(result, Response):
            return result
        if isinstance(result, (dict, list)):
            return Response.json(result)

        content_type = JSON_CONTENT_TYPE if self._mode is RouterMode.JSON else HTML_CONTENT_TYPE
        if result is None:
            body: str | bytes = ""
        elif isinstance(result, (str, bytes)):
            body = result
        else:
            body = str(result)
        return Response(body=body, status=200, content_type=content_type)
