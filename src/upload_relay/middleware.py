"""ASGI middleware enforcing the JSON request-body ceiling.

Oversized bodies are refused with 413 before any route handler parses
them: immediately when ``Content-Length`` already exceeds the limit,
otherwise as soon as the streamed body crosses it.
"""

from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.upload_relay.errors import error_response

PAYLOAD_TOO_LARGE = "Request entity too large"


def is_json_content_type(headers: Headers) -> bool:
    content_type = headers.get("content-type", "").split(";", 1)[0].strip().lower()
    return content_type == "application/json" or content_type.endswith("+json")


class JSONBodyLimitMiddleware:
    """Reject JSON bodies larger than *max_body_size* bytes."""

    def __init__(self, app: ASGIApp, max_body_size: int) -> None:
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if not is_json_content_type(headers):
            await self.app(scope, receive, send)
            return

        content_length = headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > self.max_body_size:
            response = error_response(413, PAYLOAD_TOO_LARGE)
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    raise HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)
