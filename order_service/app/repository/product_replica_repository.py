"""Replica store for the order service's local copy of the product catalog"""

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..core.setting import get_settings
from ..events.schemas.product_events import ProductMessage
from ..models.base import utcnow_naive
from ..models.product_replica import ProductReplica
from ..utils.logging import setup_order_logging as setup_logging

logger = setup_logging(
    "order_service.repository.product_replica", log_level=get_settings().LOG_LEVEL
)


class ReplicaStore(ABC):
    @abstractmethod
    async def get(self, product_id: int) -> Optional[ProductReplica]:
        pass

    @abstractmethod
    async def upsert_stock(
        self, product_id: int, stock: int, event_type: Optional[str] = None
    ) -> bool:
        """Set the stock of an existing replica; False when the row is absent"""
        pass

    @abstractmethod
    async def insert_snapshot(self, message: ProductMessage) -> ProductReplica:
        pass

    @abstractmethod
    async def delete(self, product_id: int) -> bool:
        """Remove a replica; False when there was nothing to remove"""
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    async def has_sufficient_stock(self, product_id: int, quantity: int) -> bool:
        """True when the replica holds the product with at least ``quantity`` in stock"""
        replica = await self.get(product_id)
        return replica is not None and replica.stock >= quantity

    async def is_synchronized(self) -> bool:
        """An empty replica has never received the catalog"""
        if await self.count() > 0:
            return True
        logger.warning(
            "Product replica is empty, trigger a full sync from the product service",
            extra={"operation": "replica_sync_check"},
        )
        return False


class SqlAlchemyReplicaStore(ReplicaStore):
    """One short transaction per call against ``product_replicas``"""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def get(self, product_id: int) -> Optional[ProductReplica]:
        async with self.session_maker() as session:
            return await session.get(ProductReplica, product_id)

    async def upsert_stock(
        self, product_id: int, stock: int, event_type: Optional[str] = None
    ) -> bool:
        async with self.session_maker() as session:
            result = await session.execute(
                update(ProductReplica)
                .where(ProductReplica.id == product_id)
                .values(
                    stock=stock,
                    last_event_type=event_type,
                    last_synced_at=utcnow_naive(),
                )
            )
            await session.commit()
            return result.rowcount > 0

    async def insert_snapshot(self, message: ProductMessage) -> ProductReplica:
        replica = ProductReplica(
            id=message.id,
            name=message.name,
            price=message.price,
            category=message.category,
            image_url=message.image_url,
            stock=message.stock or 0,
            brand=message.brand,
            last_event_type=message.event_type,
        )
        async with self.session_maker() as session:
            # merge keeps a redelivered snapshot from tripping the primary key
            replica = await session.merge(replica)
            await session.commit()
            return replica

    async def delete(self, product_id: int) -> bool:
        async with self.session_maker() as session:
            result = await session.execute(
                delete(ProductReplica).where(ProductReplica.id == product_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def count(self) -> int:
        async with self.session_maker() as session:
            result = await session.execute(
                select(func.count()).select_from(ProductReplica)
            )
            return int(result.scalar_one())
