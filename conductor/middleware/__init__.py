"""Request-ID middleware: tags every HTTP request with a trace ID.

Pure ASGI (not BaseHTTPMiddleware) so the request state is populated
before any route or exception handler runs.
"""

import uuid

from starlette.types import ASGIApp, Receive, Scope, Send

REQUEST_ID_HEADER = b"x-request-id"
_MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware:
    """Injects ``X-Request-ID`` into every HTTP request/response cycle.

    A client-supplied ID is reused when it is short enough to be a sane
    trace ID; otherwise a random UUID-4 is generated.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        supplied = headers.get(REQUEST_ID_HEADER, b"").decode("latin-1")
        if supplied and len(supplied) <= _MAX_REQUEST_ID_LENGTH:
            request_id = supplied
        else:
            request_id = str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: dict) -> None:
            if message["type"] == "http.response.start":
                raw_headers: list = list(message.get("headers", []))
                raw_headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message = {**message, "headers": raw_headers}
            await send(message)

        await self.app(scope, receive, send_with_id)
