"""Request body size limit middleware.

Broadcast requests carry base64 attachments inline, so bodies are capped
(MAX_REQUEST_BYTES). A declared Content-Length over the cap is refused up
front; otherwise the streamed body is counted as it is read. Raw ASGI.
"""

import json
from typing import Callable

from fastapi import HTTPException

from agora.middleware.request_id import get_header


class PayloadTooLarge(HTTPException):
    """Raised inside receive() once the streamed body exceeds the cap.

    An HTTPException so FastAPI re-raises it from body parsing and the
    registered handler answers 413.
    """

    def __init__(self, max_bytes: int) -> None:
        super().__init__(
            status_code=413,
            detail=f"Request body must be at most {max_bytes} bytes",
        )


async def _send_413(send: Callable, max_bytes: int) -> None:
    body = json.dumps(
        {
            "error": "PAYLOAD_TOO_LARGE",
            "message": f"Request body must be at most {max_bytes} bytes",
            "details": {"max_bytes": max_bytes},
        }
    ).encode()
    await send({
        "type": "http.response.start",
        "status": 413,
        "headers": [(b"content-type", b"application/json")],
    })
    await send({"type": "http.response.body", "body": body, "more_body": False})


def RequestSizeLimitMiddleware(app: Callable, max_bytes: int) -> Callable:
    """Reject requests whose body exceeds max_bytes with 413. Raw ASGI."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        declared = get_header(scope, "content-length")
        if declared and declared.isdigit() and int(declared) > max_bytes:
            await _send_413(send, max_bytes)
            return

        received = 0
        response_started = False

        async def counting_receive() -> dict:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > max_bytes:
                    raise PayloadTooLarge(max_bytes)
            return message

        async def send_wrapper(message: dict) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await app(scope, counting_receive, send_wrapper)
        except PayloadTooLarge:
            if not response_started:
                await _send_413(send, max_bytes)

    return asgi_app
