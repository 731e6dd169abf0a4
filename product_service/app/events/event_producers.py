"""
Product Service Event Producers
===============================

Turns product snapshots into change envelopes and hands them to Kafka.

Publishing is fire-and-forget: the caller's database transaction has already
committed, so a broker failure is logged from the delivery callback and never
travels back up to the CRUD layer.
"""

import asyncio
from functools import partial
from typing import Iterable

from aiokafka.errors import KafkaError  # type: ignore
from pydantic import ValidationError

from ..core.setting import get_settings
from ..models.product import Product
from ..utils.logging import setup_product_logging as setup_logging
from .base import EventPublisher, EventPublishError
from .schemas import ProductEventType, ProductMessage

settings = get_settings()
logger = setup_logging("product_service.events.producers", log_level=settings.LOG_LEVEL)


class ProductEventProducer:
    """Publishes product change envelopes keyed by product id"""

    def __init__(self, publisher: EventPublisher, topic: str):
        self.publisher = publisher
        self.topic = topic

    def build_message(
        self, product: Product, event_type: ProductEventType
    ) -> ProductMessage:
        try:
            return ProductMessage.from_product(product, event_type)
        except (ValidationError, ValueError) as e:
            raise EventPublishError(
                f"Cannot build {event_type.value} envelope for product "
                f"{getattr(product, 'id', None)}: {e}"
            ) from e

    async def publish(self, message: ProductMessage) -> bool:
        """
        Enqueue one envelope; delivery outcome is logged asynchronously.

        Returns False when the record never reached the producer, either
        because Kafka is unavailable or because the send itself failed.
        """
        key = str(message.id)
        try:
            payload = message.to_bytes()
        except (TypeError, ValueError) as e:
            raise EventPublishError(
                f"Failed to serialize {message.event_type.value} envelope "
                f"for product {message.id}: {e}"
            ) from e

        try:
            future = await self.publisher.send(self.topic, key=key, value=payload)
        except KafkaError as e:
            self._log_delivery_failure(message, key, e)
            return False

        if future is None:
            logger.warning(
                f"Kafka not available, logging event instead: {message.event_type.value}",
                extra={
                    "topic": self.topic,
                    "key": key,
                    "event_type": message.event_type.value,
                    "event_data": message.to_wire(),
                    "operation": "publish_degraded",
                },
            )
            return False

        future.add_done_callback(partial(self._on_delivery, message, key))
        return True

    async def publish_bulk(self, products: Iterable[Product]) -> int:
        """Emit one INITIAL_LOAD envelope per product; returns how many reached the producer"""
        published = 0
        for product in products:
            message = self.build_message(product, ProductEventType.INITIAL_LOAD)
            if await self.publish(message):
                published += 1

        await self.publisher.flush()

        logger.info(
            "Initial product list sent",
            extra={
                "topic": self.topic,
                "records_published": published,
                "operation": "publish_bulk",
            },
        )
        return published

    def _on_delivery(
        self, message: ProductMessage, key: str, future: "asyncio.Future"
    ) -> None:
        if future.cancelled():
            self._log_delivery_failure(
                message, key, asyncio.CancelledError("delivery cancelled")
            )
            return

        error = future.exception()
        if error is not None:
            self._log_delivery_failure(message, key, error)
            return

        record_metadata = future.result()
        logger.info(
            "Product message sent successfully",
            extra={
                "topic": self.topic,
                "key": key,
                "event_type": message.event_type.value,
                "partition": getattr(record_metadata, "partition", None),
                "offset": getattr(record_metadata, "offset", None),
                "operation": "publish_event",
            },
        )

    def _log_delivery_failure(
        self, message: ProductMessage, key: str, error: BaseException
    ) -> None:
        logger.error(
            "Failed to send product message",
            extra={
                "topic": self.topic,
                "key": key,
                "event_type": message.event_type.value,
                "error": str(error),
                "error_type": type(error).__name__,
                "operation": "publish_event_failed",
            },
        )
