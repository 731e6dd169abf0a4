"""Database access for the Order Service product replica"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..models.base import OrderServiceBase
from ..utils.logging import setup_order_logging as setup_logging
from .setting import get_settings

logger = setup_logging("order_service.database", log_level=get_settings().LOG_LEVEL)


class OrderServiceDatabaseManager:
    """Async engine and session factory backing the product replica."""

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 40,
    ) -> None:
        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}

        if "sqlite" in database_url:
            engine_kwargs["connect_args"] = {"timeout": 60, "check_same_thread": False}
        else:
            engine_kwargs.update(
                {
                    "pool_size": pool_size,
                    "max_overflow": max_overflow,
                    "pool_timeout": 45,
                    "pool_recycle": 3600,
                    "pool_pre_ping": True,
                    "pool_reset_on_return": "commit",
                    "connect_args": {
                        "command_timeout": 30,
                        "server_settings": {"jit": "off"},
                    },
                }
            )

        self.async_engine = create_async_engine(database_url, **engine_kwargs)
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_tables(self) -> None:
        """Create all Order Service database tables."""
        async with self.async_engine.begin() as conn:
            await conn.run_sync(OrderServiceBase.metadata.create_all, checkfirst=True)
        logger.info(
            "Database tables created successfully",
            extra={"operation": "create_tables"},
        )

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.async_session_maker() as session:
            yield session

    async def ping(self) -> None:
        """Round-trip to the replica database; raises when it is unreachable"""
        async with self.async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self.async_engine.dispose()
        logger.info("Replica database engine disposed", extra={"operation": "close"})


settings = get_settings()
database_manager = OrderServiceDatabaseManager(
    database_url=settings.ORDER_DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency for FastAPI using Order Service database manager"""
    async for session in database_manager.get_async_session():
        yield session
