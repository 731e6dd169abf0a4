"""
Order Service FastAPI Application

Keeps a local replica of the product catalog by consuming the catalog's
product change events.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.v1.health import router as health_router
from .api.v1.product_sync import router as product_sync_router
from .core.database import database_manager
from .core.events import close_events, get_product_sync_consumer, init_events
from .core.setting import get_settings
from .middleware.auth import setup_order_auth_middleware
from .middleware.error import setup_order_error_handling
from .utils.logging import setup_order_logging as setup_logging

settings = get_settings()
enable_file_logging = settings.ENVIRONMENT.lower() in ["production", "staging"]

logger = setup_logging(
    "order_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=enable_file_logging,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    startup_start = time.time()

    try:
        logger.info(
            "Starting order service initialization",
            extra={
                "environment": settings.ENVIRONMENT,
                "debug_mode": settings.DEBUG,
                "service_version": settings.APP_VERSION,
            },
        )

        db_start = time.time()
        await database_manager.create_tables()
        db_duration = int((time.time() - db_start) * 1000)

        consumer_start = time.time()
        await init_events()
        consumer_duration = int((time.time() - consumer_start) * 1000)
        consumer = get_product_sync_consumer()

        logger.info(
            "Order service started successfully",
            extra={
                "total_startup_duration_ms": int((time.time() - startup_start) * 1000),
                "database_init_ms": db_duration,
                "product_consumer_init_ms": consumer_duration,
                "product_consumer_running": bool(consumer and consumer.running),
                "replica_create_on_missing": settings.REPLICA_CREATE_ON_MISSING,
            },
        )

    except Exception as e:
        logger.error(
            "Failed to start order service",
            exc_info=True,
            extra={
                "startup_duration_ms": int((time.time() - startup_start) * 1000),
                "error_type": type(e).__name__,
            },
        )
        raise

    yield

    shutdown_start = time.time()
    logger.info("Starting order service shutdown")
    await close_events()
    await database_manager.close()
    logger.info(
        "Order service shutdown completed",
        extra={"shutdown_duration_ms": int((time.time() - shutdown_start) * 1000)},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )

    setup_order_auth_middleware(app)
    setup_order_error_handling(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(
        product_sync_router, prefix="/api/v1", tags=["Product Replica Sync"]
    )

    logger.info(
        "Order service application configured",
        extra={"app_name": settings.APP_NAME, "app_version": settings.APP_VERSION},
    )
    return app


app = create_app()
