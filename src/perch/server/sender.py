"""ASGI response sending."""

import logging
from typing import Any

from perch._internal.asgi import Send
from perch.http.response import Response

logger = logging.getLogger("perch.server")


def _body_allowed(status: int) -> bool:
    # 1xx, 204 and 304 responses carry no message body.
    return not (100 <= status < 200 or status in {204, 304})


def _start_message(response: Response) -> dict[str, Any]:
    response.mark_sent()
    if not _body_allowed(response.status):
        response.set_body(b"")
    return {
        "type": "http.response.start",
        "status": response.status,
        "headers": response.raw_headers(),
    }


def _server_error() -> Response:
    response = Response(body="Internal Server Error", status=500)
    return response.set_header("Content-Type", "text/plain; charset=utf-8")


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI ``send()`` calls.

    A response that cannot go out (sent before, or a header value outside
    latin-1) is logged and replaced by a plain 500 before anything reaches
    the client.
    """
    try:
        start = _start_message(response)
    except Exception:
        logger.exception("Cannot send %d response; answering 500", response.status)
        response = _server_error()
        start = _start_message(response)

    await send(start)
    await send({"type": "http.response.body", "body": response.body_bytes})
