from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..models.base import ProductServiceBase
from ..utils.logging import setup_product_logging as setup_logging
from .setting import get_settings

logger = setup_logging("product_service.database", log_level=get_settings().LOG_LEVEL)


def _mask_database_url(database_url: str) -> str:
    scheme, _, rest = database_url.partition("://")
    if "@" not in rest:
        return database_url
    return f"{scheme}://***@{rest.rsplit('@', 1)[1]}"


class ProductServiceDatabaseManager:
    """Async engine and session factory for the authoritative product catalog."""

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 25,
        max_overflow: int = 50,
    ) -> None:
        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}

        if "sqlite" in database_url:
            engine_kwargs["connect_args"] = {"timeout": 60, "check_same_thread": False}
            database_type = "sqlite"
        else:
            engine_kwargs.update(
                {
                    "pool_size": pool_size,
                    "max_overflow": max_overflow,
                    "pool_timeout": 45,
                    "pool_recycle": 3600,
                    "pool_pre_ping": True,
                    "connect_args": {
                        "command_timeout": 30,
                        "prepared_statement_cache_size": 0,
                    },
                }
            )
            database_type = "postgresql"

        self.async_engine = create_async_engine(database_url, **engine_kwargs)
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "Product Service database manager initialized",
            extra={
                "operation": "database_manager_init",
                "database_url": _mask_database_url(database_url),
                "database_type": database_type,
                "echo": echo,
            },
        )

    async def create_tables(self) -> None:
        """Create all Product Service database tables."""
        try:
            async with self.async_engine.begin() as conn:
                await conn.run_sync(
                    ProductServiceBase.metadata.create_all, checkfirst=True
                )
            logger.info(
                "Database tables created successfully",
                extra={"operation": "create_tables"},
            )
        except Exception as e:
            # Another instance may have created them concurrently
            logger.warning(
                "Database table creation failed",
                extra={"operation": "create_tables", "error": str(e)},
            )

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async database session for Product Service."""
        async with self.async_session_maker() as session:
            yield session

    async def ping(self) -> None:
        async with self.async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        await self.async_engine.dispose()
        logger.info(
            "Product Service database connections closed",
            extra={"operation": "database_close"},
        )


settings = get_settings()
database_manager = ProductServiceDatabaseManager(
    database_url=settings.PRODUCT_DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
)


# Dependency injection function for FastAPI
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session for dependency injection."""
    async for session in database_manager.get_async_session():
        yield session
