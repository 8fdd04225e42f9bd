"""ASGI handler: the transport boundary.

The only component that touches raw ASGI. Reads the full request body,
builds a ``Request``, runs the synchronous dispatch pipeline in a worker
thread and sends the resulting ``Response`` once.
"""

import logging
from collections.abc import Callable

import anyio.to_thread

from perch._internal.asgi import Receive, Scope, Send
from perch.http.request import Request
from perch.http.response import Response
from perch.server.sender import send_response

logger = logging.getLogger("perch.server")

type Dispatch = Callable[[Request], Response]


class BodyTooLarge(Exception):  # noqa: N818
    """The request body exceeds the configured limit."""


async def read_body(receive: Receive, limit: int, declared: int | None = None) -> bytes:
    """Collect the request body, enforcing *limit* bytes.

    Raises:
        BodyTooLarge: If the declared or received size exceeds *limit*.
    """
    if declared is not None and declared > limit:
        raise BodyTooLarge
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        size += len(chunk)
        if size > limit:
            raise BodyTooLarge
        chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def _declared_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", ()):
        if name.lower() == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatch: Dispatch,
    base_path: str = "",
    max_content_length: int,
) -> None:
    """Process a single HTTP request."""
    if scope["type"] != "http":
        return

    try:
        body = await read_body(receive, max_content_length, _declared_length(scope))
    except BodyTooLarge:
        logger.warning(
            "413 %s %s: body exceeds %d bytes",
            scope.get("method"),
            scope.get("path"),
            max_content_length,
        )
        response = Response(body="Payload Too Large", status=413)
        await send_response(response.set_header("Content-Type", "text/plain; charset=utf-8"), send)
        return

    request = Request.from_asgi(scope, body, base_path)
    response = await anyio.to_thread.run_sync(dispatch, request)
    await send_response(response, send)
