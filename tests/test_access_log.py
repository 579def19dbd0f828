"""Tests for the AccessLogMiddleware."""

import logging

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from conductor.middleware import RequestIDMiddleware
from conductor.middleware.access_log import AccessLogMiddleware
from tests.conftest import auth_header


@pytest.fixture()
def test_app() -> FastAPI:
    """Standalone FastAPI app with both middleware layers."""
    app = FastAPI()

    # AccessLogMiddleware innermost (added first), RequestIDMiddleware outermost.
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/api/ok")
    async def _ok():
        return {"status": "ok"}

    @app.get("/api/fail")
    async def _fail():
        raise HTTPException(400, detail="bad input")

    @app.get("/api/server_error")
    async def _server_error():
        raise RuntimeError("boom")

    @app.get("/health")
    async def _health():
        return {"status": "healthy"}

    return app


@pytest.fixture()
def client(test_app: FastAPI) -> TestClient:
    return TestClient(test_app, raise_server_exceptions=False)


def _metric_records(caplog):
    return [r for r in caplog.records if "METRIC" in r.message]


class TestAccessLogMiddleware:
    """Access log middleware emits structured METRIC lines."""

    def test_successful_request_logged(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="conductor.access"):
            client.get("/api/ok")
        line = _metric_records(caplog)[0].message
        assert "type=http_request" in line
        assert "method=GET" in line
        assert "path=/api/ok" in line
        assert "status=200" in line
        assert "req_id=-" not in line

    def test_error_request_logged_with_detail(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="conductor.access"):
            client.get("/api/fail")
        record = _metric_records(caplog)[0]
        assert "status=400" in record.message
        assert "error=bad input" in record.message
        assert record.levelno == logging.WARNING

    def test_server_error_logged(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="conductor.access"):
            client.get("/api/server_error")
        record = _metric_records(caplog)[0]
        assert "status=500" in record.message
        assert record.levelno == logging.ERROR

    def test_health_check_not_logged(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="conductor.access"):
            client.get("/health")
        assert _metric_records(caplog) == []

    def test_operator_dash_without_token(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="conductor.access"):
            client.get("/api/ok")
        assert "operator=-" in _metric_records(caplog)[0].message

    def test_operator_from_token(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="conductor.access"):
            client.get("/api/ok", headers=auth_header("alice"))
        assert "operator=alice" in _metric_records(caplog)[0].message

    def test_garbage_token_is_dash(self, client, caplog):
        with caplog.at_level(logging.DEBUG, logger="conductor.access"):
            client.get("/api/ok", headers={"Authorization": "Bearer not-a-jwt"})
        assert "operator=-" in _metric_records(caplog)[0].message
