"""
Error handling for Order Service.

Every exception escaping a route is rendered as the ``{"error": {...}}``
envelope used across the services. An unreachable replica database is
answered with 503 so that callers can retry instead of reporting a bug.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...core.setting import get_settings
from ...utils.logging import setup_order_logging as setup_logging

logger = setup_logging("order_service.error_handler", log_level=get_settings().LOG_LEVEL)


class OrderServiceErrorHandler:
    """Exception handlers for the replica status and health routes"""

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        app.add_exception_handler(
            StarletteHTTPException, OrderServiceErrorHandler.handle_http_error
        )
        app.add_exception_handler(
            RequestValidationError, OrderServiceErrorHandler.handle_request_validation
        )
        app.add_exception_handler(ValueError, OrderServiceErrorHandler.handle_value_error)
        app.add_exception_handler(
            OperationalError, OrderServiceErrorHandler.handle_replica_unavailable
        )
        app.add_exception_handler(Exception, OrderServiceErrorHandler.handle_unexpected)

    @staticmethod
    async def handle_http_error(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return OrderServiceErrorHandler._create_error_response(
            request, exc.status_code, "http_error", str(exc.detail)
        )

    @staticmethod
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [
            {
                "field": ".".join(str(part) for part in problem["loc"]),
                "message": problem["msg"],
                "type": problem["type"],
            }
            for problem in exc.errors()
        ]
        return OrderServiceErrorHandler._create_error_response(
            request,
            422,
            "validation_error",
            "Request validation failed",
            details={"validation_errors": problems},
        )

    @staticmethod
    async def handle_value_error(request: Request, exc: ValueError) -> JSONResponse:
        return OrderServiceErrorHandler._create_error_response(
            request, 400, "value_error", str(exc)
        )

    @staticmethod
    async def handle_replica_unavailable(
        request: Request, exc: OperationalError
    ) -> JSONResponse:
        logger.error(
            "Replica database unavailable",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", "unknown"),
                "path": request.url.path,
                "error": str(exc.orig),
                "event_type": "replica_unavailable",
            },
        )
        return OrderServiceErrorHandler._create_error_response(
            request, 503, "replica_unavailable", "Product replica is unavailable"
        )

    @staticmethod
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
            extra={
                "correlation_id": getattr(request.state, "correlation_id", "unknown"),
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                "traceback": traceback.format_exc(),
                "event_type": "unhandled_exception",
            },
        )
        return OrderServiceErrorHandler._create_error_response(
            request, 500, "internal_server_error", "An internal server error occurred"
        )

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        error: Dict[str, Any] = {
            "type": error_type,
            "message": message,
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
        }
        if details:
            error["details"] = details

        if status_code < 500:
            logger.warning(
                f"Client error: {error_type}",
                extra={
                    "status_code": status_code,
                    "error_type": error_type,
                    "path": request.url.path,
                    "event_type": "client_error",
                },
            )

        return JSONResponse(status_code=status_code, content={"error": error})


def setup_order_error_handling(app: FastAPI) -> None:
    OrderServiceErrorHandler.setup_error_handlers(app)
    logger.info("Order Service error handling configured")
