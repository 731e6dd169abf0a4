"""
Unit tests for Order Service Error Handler.
"""

import json
from unittest.mock import Mock

import pytest
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_service.app.middleware.error.error_handler import (
    OrderServiceErrorHandler,
    setup_order_error_handling,
)


class TestOrderServiceErrorHandler:
    @pytest.fixture
    def app(self):
        app = FastAPI()
        setup_order_error_handling(app)
        return app

    @pytest.fixture
    def mock_request(self):
        mock_request = Mock(spec=Request)
        mock_request.url.path = "/api/v1/product-sync/status"
        mock_request.method = "GET"
        mock_request.state.correlation_id = "test-correlation-id"
        return mock_request

    def test_setup_error_handlers(self, app):
        assert StarletteHTTPException in app.exception_handlers
        assert RequestValidationError in app.exception_handlers
        assert ValueError in app.exception_handlers
        assert OperationalError in app.exception_handlers
        assert Exception in app.exception_handlers

    @pytest.mark.asyncio
    async def test_http_exception_handler(self, app, mock_request):
        handler = app.exception_handlers[StarletteHTTPException]

        response = await handler(
            mock_request, StarletteHTTPException(status_code=403, detail="Required role: admin")
        )

        assert response.status_code == 403
        body = json.loads(response.body)
        assert body["error"]["type"] == "http_error"
        assert body["error"]["message"] == "Required role: admin"
        assert body["error"]["correlation_id"] == "test-correlation-id"

    @pytest.mark.asyncio
    async def test_value_error_handler(self, app, mock_request):
        handler = app.exception_handlers[ValueError]

        response = await handler(mock_request, ValueError("bad value"))

        assert response.status_code == 400
        assert json.loads(response.body)["error"]["type"] == "value_error"

    @pytest.mark.asyncio
    async def test_unhandled_exception_is_masked(self, app, mock_request):
        handler = app.exception_handlers[Exception]

        response = await handler(mock_request, RuntimeError("secret detail"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error"]["type"] == "internal_server_error"
        assert "secret detail" not in body["error"]["message"]

    @pytest.mark.asyncio
    async def test_unreachable_replica_is_503(self, app, mock_request):
        handler = app.exception_handlers[OperationalError]

        response = await handler(
            mock_request,
            OperationalError("SELECT count(*)", {}, Exception("connection refused")),
        )

        assert response.status_code == 503
        assert json.loads(response.body)["error"]["type"] == "replica_unavailable"

    def test_error_response_includes_details_when_given(self, mock_request):
        response = OrderServiceErrorHandler._create_error_response(
            request=mock_request,
            status_code=422,
            error_type="validation_error",
            message="Request validation failed",
            details={"validation_errors": []},
        )

        body = json.loads(response.body)
        assert body["error"]["details"] == {"validation_errors": []}
        assert body["error"]["path"] == "/api/v1/product-sync/status"
