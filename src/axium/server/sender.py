"""Writes a ``Response`` to the ASGI ``send`` channel.

Every axium response is complete in memory, so it always goes out as one
``http.response.start`` message followed by a single body message.
"""

from typing import Any

from axium._internal.asgi import Send
from axium.http.response import Response

# Statuses whose responses never carry a message body.
NO_BODY_STATUSES = frozenset({204, 304})


def response_messages(response: Response) -> tuple[dict[str, Any], dict[str, Any]]:
    """The start and body messages for *response*.

    Header names are lower-cased; ``content-length`` is computed from the
    encoded body, which is dropped for 1xx, 204 and 304.
    """
    status = response.status
    body = b"" if status < 200 or status in NO_BODY_STATUSES else response.body_bytes
    headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (
            ("content-type", response.content_type),
            *response.headers,
            ("content-length", str(len(body))),
        )
    ]
    start = {"type": "http.response.start", "status": status, "headers": headers}
    return start, {"type": "http.response.body", "body": body}


async def send_response(response: Response, send: Send) -> None:
    for message in response_messages(response):
        await send(message)
