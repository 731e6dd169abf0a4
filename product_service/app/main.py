"""
Product Service FastAPI Application
==================================

Owns the authoritative product catalog and publishes every committed change
to the product topic. On startup the whole catalog is published once so
downstream replicas can bootstrap; admins can force the same resync later.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.health import router as health_router
from .api.v1.kafka_sync import router as kafka_sync_router
from .api.v1.products import router as products_router
from .core.database import database_manager
from .core.event_management import close_events, get_change_dispatcher, init_events
from .core.setting import get_settings
from .middleware.auth.auth_middleware import setup_product_auth_middleware
from .middleware.error.error_handler import setup_product_error_handling
from .utils.logging import setup_product_logging as setup_logging

settings = get_settings()
enable_file_logging = settings.ENVIRONMENT.lower() in ["production", "staging"]

logger = setup_logging(
    "product_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=enable_file_logging,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup and shutdown."""
    startup_start = time.time()

    try:
        await _initialize_services()
    except Exception as e:
        logger.error(
            "Failed to start product service",
            exc_info=True,
            extra={
                "startup_duration_ms": int((time.time() - startup_start) * 1000),
                "error_type": type(e).__name__,
            },
        )
        raise

    logger.info(
        "Product service started successfully",
        extra={"total_startup_duration_ms": int((time.time() - startup_start) * 1000)},
    )

    yield

    await _shutdown_services()


async def _initialize_services() -> None:
    logger.info(
        "Starting product service initialization",
        extra={
            "environment": settings.ENVIRONMENT,
            "debug_mode": settings.DEBUG,
            "file_logging_enabled": enable_file_logging,
            "service_version": settings.APP_VERSION,
        },
    )

    # Tables must exist before the startup sync reads the catalog
    await database_manager.create_tables()
    await init_events()

    dispatcher = get_change_dispatcher()
    if settings.SYNC_ON_STARTUP and dispatcher is not None:
        await dispatcher.on_startup()


async def _shutdown_services() -> None:
    shutdown_start = time.time()
    logger.info("Starting product service shutdown")

    await close_events()
    await database_manager.close()

    logger.info(
        "Product service shutdown completed",
        extra={"shutdown_duration_ms": int((time.time() - shutdown_start) * 1000)},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    _setup_middleware(app)
    _setup_cors(app)
    _setup_routers(app)

    return app


def _setup_middleware(app: FastAPI) -> None:
    setup_product_auth_middleware(app)
    setup_product_error_handling(app)

    # Wraps auth and routes; sets request.state.correlation_id
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


def _setup_cors(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )
    logger.info(
        "CORS middleware configured",
        extra={
            "allowed_origins": len(settings.CORS_ORIGINS),
            "credentials_allowed": settings.CORS_CREDENTIALS,
        },
    )


def _setup_routers(app: FastAPI) -> None:
    routers_info: list[dict[str, Any]] = []

    app.include_router(health_router, tags=["Health"])
    routers_info.append({"router": "health", "prefix": ""})

    app.include_router(products_router, prefix="/api/v1", tags=["Product Management"])
    routers_info.append({"router": "products", "prefix": "/api/v1"})

    app.include_router(kafka_sync_router, prefix="/api/v1", tags=["Kafka Sync"])
    routers_info.append({"router": "kafka_sync", "prefix": "/api/v1"})

    logger.info(
        "API routes configured",
        extra={"total_routers": len(routers_info), "routers": routers_info},
    )


app = create_app()
