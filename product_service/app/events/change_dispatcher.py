"""
Product change dispatcher.

Bridges committed catalog mutations to the product topic. Every hook runs
after the authoritative write, so nothing here is allowed to fail the
mutation: emitter errors are logged and absorbed. Bulk resync surfaces its
failures as a ``SyncResult`` instead of an exception.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.setting import get_settings
from ..middleware.common.operation_logging import (
    OperationLoggingOptions,
    audited,
    positive_id,
    required,
    timed,
    validate_parameters,
)
from ..models.product import Product, ProductCategory
from ..repository.product_repository import AuthoritativeProductStore
from ..utils.logging import setup_product_logging as setup_logging
from .event_producers import ProductEventProducer
from .schemas import ProductEventType, ProductMessage

logger = setup_logging(
    "product_service.events.dispatcher", log_level=get_settings().LOG_LEVEL
)


@dataclass
class SyncResult:
    success: bool
    records_published: int
    message: str
    details: str


class ProductChangeDispatcher:
    """Emits change envelopes for committed product mutations"""

    def __init__(
        self,
        producer: ProductEventProducer,
        product_store: AuthoritativeProductStore,
        operation_options: Optional[OperationLoggingOptions] = None,
    ):
        self.producer = producer
        self.product_store = product_store
        self.operation_options = operation_options or OperationLoggingOptions()
        self._startup_sync_done = False

    @validate_parameters(product=required)
    @audited("product_created_event")
    @timed("product_created_event")
    async def on_created(self, product: Product) -> None:
        await self._emit_snapshot(product, ProductEventType.CREATED)

    @validate_parameters(product=required)
    @audited("product_updated_event")
    @timed("product_updated_event")
    async def on_updated(self, product: Product) -> None:
        await self._emit_snapshot(product, ProductEventType.UPDATED)

    @validate_parameters(product_id=positive_id)
    @audited("product_deleted_event")
    @timed("product_deleted_event")
    async def on_deleted(self, product_id: int) -> None:
        await self._emit(ProductMessage.deleted(product_id))

    @audited("startup_catalog_sync")
    async def on_startup(self) -> None:
        """Publish the whole catalog once per process; never raises"""
        if self._startup_sync_done:
            logger.info(
                "Startup catalog sync already ran, skipping",
                extra={"operation": "startup_catalog_sync"},
            )
            return
        self._startup_sync_done = True

        logger.info(
            "Starting Kafka initialization - sending existing products",
            extra={"operation": "startup_catalog_sync"},
        )
        result = await self._republish_catalog()
        if result.success:
            logger.info(
                "Kafka initialization completed",
                extra={
                    "operation": "startup_catalog_sync",
                    "records_published": result.records_published,
                },
            )
        else:
            logger.error(
                "Error during Kafka initialization",
                extra={"operation": "startup_catalog_sync", "error": result.details},
            )

    @audited("force_full_sync")
    @timed("force_full_sync", warning_threshold_ms=30000)
    async def on_force_resync(self) -> SyncResult:
        """Re-emit the current catalog as INITIAL_LOAD records"""
        logger.info(
            "Admin initiated full product synchronization to Kafka",
            extra={"operation": "force_full_sync"},
        )
        return await self._republish_catalog()

    async def sync_status(self) -> Dict[str, Any]:
        total_products = await self.product_store.count()
        return {
            "total_products": total_products,
            "categories": [category.value for category in ProductCategory],
            "topic": self.producer.topic,
            "startup_sync_done": self._startup_sync_done,
        }

    async def _republish_catalog(self) -> SyncResult:
        try:
            products = await self.product_store.list_all()
        except Exception as e:
            logger.error(
                "Failed to load products for synchronization",
                extra={"operation": "catalog_sync_fetch", "error": str(e)},
                exc_info=True,
            )
            return SyncResult(
                success=False,
                records_published=0,
                message=f"Failed to perform full product synchronization: {e}",
                details="Synchronization failed",
            )

        if not products:
            message = "No products found in database. Nothing to synchronize."
            logger.info(message, extra={"operation": "catalog_sync"})
            return SyncResult(
                success=True,
                records_published=0,
                message=message,
                details="0 products synchronized",
            )

        try:
            published = await self.producer.publish_bulk(products)
        except Exception as e:
            logger.error(
                "Failed to publish product catalog",
                extra={"operation": "catalog_sync_publish", "error": str(e)},
                exc_info=True,
            )
            return SyncResult(
                success=False,
                records_published=0,
                message=f"Failed to perform full product synchronization: {e}",
                details="Synchronization failed",
            )

        missed = len(products) - published
        if missed:
            logger.error(
                "Kafka unavailable, catalog synchronization incomplete",
                extra={
                    "operation": "catalog_sync_publish",
                    "records_published": published,
                    "records_missed": missed,
                },
            )
            return SyncResult(
                success=False,
                records_published=published,
                message="Failed to perform full product synchronization: Kafka unavailable",
                details=f"{published} products sent to Kafka topic, {missed} not sent",
            )

        return SyncResult(
            success=True,
            records_published=published,
            message="Full product synchronization completed successfully",
            details=f"{published} products sent to Kafka topic",
        )

    async def _emit_snapshot(
        self, product: Product, event_type: ProductEventType
    ) -> None:
        try:
            message = self.producer.build_message(product, event_type)
        except Exception as e:
            self._log_emit_failure(getattr(product, "id", None), event_type, e)
            return
        await self._emit(message)

    async def _emit(self, message: ProductMessage) -> None:
        try:
            await self.producer.publish(message)
        except Exception as e:
            self._log_emit_failure(message.id, message.event_type, e)

    def _log_emit_failure(
        self, product_id: Optional[int], event_type: ProductEventType, error: Exception
    ) -> None:
        logger.error(
            "Failed to emit product change event",
            extra={
                "product_id": product_id,
                "event_type": event_type.value,
                "error": str(error),
                "error_type": type(error).__name__,
                "operation": "emit_product_event",
            },
            exc_info=True,
        )
