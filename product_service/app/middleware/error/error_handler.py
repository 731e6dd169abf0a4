"""
Error handling middleware for Product Service.
Maps exceptions escaping the routes onto the shared JSON error envelope.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...events.base import EventPublishError
from ...utils.logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.error_handler")


def _validation_details(errors: list[Dict[str, Any]]) -> list[Dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


class ProductServiceErrorHandler:
    """
    Centralized error handling for Product Service.

    Every handled exception becomes ``{"error": {...}}`` carrying the type,
    message, correlation id, caller and request path. Unhandled exceptions
    are logged with their traceback and surface as a generic 500.
    """

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(
            request: Request, exc: StarletteHTTPException
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type="http_error",
                message=str(exc.detail),
            )

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(
            request: Request, exc: RequestValidationError
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=422,
                error_type="validation_error",
                message="Request validation failed",
                details={"validation_errors": _validation_details(exc.errors())},
            )

        @app.exception_handler(ValidationError)
        async def pydantic_validation_exception_handler(
            request: Request, exc: ValidationError
        ) -> JSONResponse:
            """Pydantic errors raised by business logic rather than request parsing"""
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=400,
                error_type="data_validation_error",
                message="Data validation failed",
                details={"validation_errors": _validation_details(exc.errors())},
            )

        @app.exception_handler(ValueError)
        async def value_error_handler(
            request: Request, exc: ValueError
        ) -> JSONResponse:
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=400,
                error_type="value_error",
                message=str(exc),
            )

        @app.exception_handler(EventPublishError)
        async def event_publish_error_handler(
            request: Request, exc: EventPublishError
        ) -> JSONResponse:
            logger.error(
                "Event publishing failed while handling request",
                extra={
                    "correlation_id": getattr(request.state, "correlation_id", None),
                    "path": request.url.path,
                    "error": str(exc),
                    "event_type": "event_publish_error",
                },
            )
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=500,
                error_type="event_publish_error",
                message="Failed to publish product event",
            )

        @app.exception_handler(Exception)
        async def unhandled_exception_handler(
            request: Request, exc: Exception
        ) -> JSONResponse:
            logger.error(
                "Unhandled exception occurred",
                extra={
                    "correlation_id": getattr(
                        request.state, "correlation_id", "unknown"
                    ),
                    "user_id": getattr(request.state, "user_id", "anonymous"),
                    "path": request.url.path,
                    "method": request.method,
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                    "traceback": traceback.format_exc(),
                    "event_type": "unhandled_exception",
                },
            )
            return ProductServiceErrorHandler._create_error_response(
                request=request,
                status_code=500,
                error_type="internal_server_error",
                message="An internal server error occurred",
                details={"exception_type": type(exc).__name__},
            )

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        user_id = getattr(request.state, "user_id", "anonymous")

        error_response: Dict[str, Any] = {
            "error": {
                "type": error_type,
                "message": message,
                "correlation_id": correlation_id,
                "user_id": user_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            }
        }
        if details:
            error_response["error"]["details"] = details

        if status_code < 500:
            logger.warning(
                f"Client error: {error_type}",
                extra={
                    "correlation_id": correlation_id,
                    "user_id": user_id,
                    "status_code": status_code,
                    "error_type": error_type,
                    "path": request.url.path,
                    "method": request.method,
                    "event_type": "client_error",
                },
            )

        return JSONResponse(status_code=status_code, content=error_response)


def setup_product_error_handling(app: FastAPI) -> None:
    ProductServiceErrorHandler.setup_error_handlers(app)
    logger.info(
        "Product Service error handling configured",
        extra={"event_type": "error_handler_setup"},
    )
