"""HTTP access log middleware: one structured METRIC line per request.

Records method, path, status code, wall time, operator (decoded from the
bearer token, no verification side effects), request ID, and the error
detail on 4xx/5xx responses.  Lines go to the ``conductor.access`` logger.
"""

from __future__ import annotations

import json
import logging
import time

import jwt as pyjwt
from starlette.types import ASGIApp, Receive, Scope, Send

from conductor.auth import decode_token

logger = logging.getLogger("conductor.access")

_SKIP_PREFIXES = ("/health", "/docs", "/openapi.json", "/favicon.ico")


class AccessLogMiddleware:
    """ASGI middleware that logs every HTTP request as a structured METRIC line."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path: str = scope.get("path", "")
        if path.startswith(_SKIP_PREFIXES):
            await self.app(scope, receive, send)
            return

        method: str = scope.get("method", "?")
        operator = _extract_operator(scope)
        t0 = time.perf_counter()
        status_code = 0
        error_detail = ""

        async def send_wrapper(message: dict) -> None:
            nonlocal status_code, error_detail
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body" and status_code >= 400:
                error_detail = _error_detail(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            if status_code == 0:
                status_code = 500
            raise
        finally:
            request_id = scope.get("state", {}).get("request_id", "-")
            wall_ms = (time.perf_counter() - t0) * 1000
            _emit(method, path, status_code, wall_ms, operator, request_id, error_detail)


def _extract_operator(scope: Scope) -> str:
    """Operator name from the Authorization header, or ``-``."""
    headers = dict(scope.get("headers", []))
    auth = headers.get(b"authorization", b"").decode("utf-8", errors="ignore")
    if not auth.startswith("Bearer "):
        return "-"
    try:
        return decode_token(auth[7:]).get("sub", "-")
    except pyjwt.PyJWTError:
        return "-"


def _error_detail(body_bytes: bytes) -> str:
    if not body_bytes:
        return ""
    try:
        body = json.loads(body_bytes)
    except ValueError:
        return ""
    if not isinstance(body, dict):
        return ""
    return str(body.get("detail", body.get("error", "")))[:200]


def _emit(
    method: str,
    path: str,
    status_code: int,
    wall_ms: float,
    operator: str,
    request_id: str,
    error_detail: str,
) -> None:
    """Emit a structured METRIC line for the HTTP request."""
    parts = [
        "METRIC | type=http_request",
        f"method={method}",
        f"path={path}",
        f"status={status_code}",
        f"wall_ms={wall_ms:.0f}",
        f"operator={operator}",
        f"req_id={request_id}",
    ]
    if error_detail:
        parts.append(f"error={error_detail.replace('|', '/')}")
    line = " | ".join(parts)

    if status_code >= 500:
        logger.error(line)
    elif status_code >= 400:
        logger.warning(line)
    else:
        logger.info(line)
