"""Unit tests for the request logging middleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from orgdesk.server.middleware import RequestLoggingMiddleware


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    @app.get("/explode")
    async def explode():
        raise RuntimeError("boom")

    return app


async def test_adds_process_time_header(app):
    with patch("orgdesk.server.middleware.request_logging.log_api_request") as mock_log:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            response = await client.get("/ping")

    assert response.status_code == 200
    assert float(response.headers["X-Process-Time"]) >= 0
    kwargs = mock_log.call_args.kwargs
    assert (kwargs["method"], kwargs["path"], kwargs["status_code"]) == ("GET", "/ping", 200)


async def test_slow_request_logs_warning(app):
    with patch("orgdesk.server.middleware.request_logging.SLOW_REQUEST_MS", -1), patch(
        "orgdesk.server.middleware.request_logging.logger"
    ) as mock_logger:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            await client.get("/ping")

    mock_logger.warning.assert_called_once()
    assert "Slow API request" in mock_logger.warning.call_args[0][0]


async def test_failed_request_is_logged_and_reraised(app):
    with patch("orgdesk.server.middleware.request_logging.log_api_request") as mock_log, patch(
        "orgdesk.server.middleware.request_logging.logger"
    ) as mock_logger:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            with pytest.raises(RuntimeError, match="boom"):
                await client.get("/explode")

    mock_logger.error.assert_called_once()
    assert mock_log.call_args.kwargs["status_code"] == 500
