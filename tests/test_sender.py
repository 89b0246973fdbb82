"""Tests for axium.server.sender response emission rules."""

from typing import Any

from axium.http.response import Response
from axium.server.sender import response_messages, send_response


async def _send(response: Response) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    await send_response(response, send)
    return messages


class TestSendResponse:
    async def test_204_drops_body(self) -> None:
        messages = await _send(Response("unexpected-body").with_status(204))
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    async def test_empty_403(self) -> None:
        messages = await _send(Response(body="", status=403))
        assert messages[0]["status"] == 403
        assert dict(messages[0]["headers"])[b"content-length"] == b"0"

    async def test_json_content_type_and_extra_headers(self) -> None:
        response = Response.json({"ok": True}).with_header("X-Trace", "abc")
        messages = await _send(response)
        headers = messages[0]["headers"]
        assert (b"content-type", b"application/json; charset=utf-8") in headers
        assert (b"x-trace", b"abc") in headers
        assert messages[1]["body"] == b'{"ok": true}'

    async def test_utf8_length(self) -> None:
        messages = await _send(Response("ação"))
        assert dict(messages[0]["headers"])[b"content-length"] == b"6"

    async def test_304_drops_body(self) -> None:
        messages = await _send(Response("cached", status=304))
        assert messages[1]["body"] == b""


class TestResponseMessages:
    def test_header_order(self) -> None:
        start, body = response_messages(Response("ok").with_header("X-Id", "7"))
        names = [name for name, _ in start["headers"]]
        assert names == [b"content-type", b"x-id", b"content-length"]
        assert body == {"type": "http.response.body", "body": b"ok"}
