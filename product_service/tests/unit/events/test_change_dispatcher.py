"""
Unit tests for ProductChangeDispatcher.
"""

import json
from unittest.mock import AsyncMock, Mock

import pytest
from aiokafka.errors import KafkaTimeoutError

from product_service.app.events.base import EventPublishError
from product_service.app.events.change_dispatcher import (
    ProductChangeDispatcher,
    SyncResult,
)
from product_service.app.events.event_producers import ProductEventProducer
from product_service.app.events.schemas import ProductEventType
from product_service.app.middleware.common.operation_logging import (
    OperationLoggingOptions,
)
from product_service.app.repository.product_repository import (
    AuthoritativeProductStore,
)


def sent_event_types(publisher):
    return [
        json.loads(call.kwargs["value"])["eventType"]
        for call in publisher.send.await_args_list
    ]


@pytest.fixture
def product_store(sample_products):
    store = Mock(spec=AuthoritativeProductStore)
    store.list_all = AsyncMock(return_value=sample_products)
    store.count = AsyncMock(return_value=len(sample_products))
    return store


@pytest.fixture
def dispatcher(publisher, product_store):
    return ProductChangeDispatcher(
        producer=ProductEventProducer(publisher, topic="product"),
        product_store=product_store,
    )


class TestSingleEventHooks:
    @pytest.mark.asyncio
    async def test_on_created_emits_created_snapshot(
        self, dispatcher, publisher, sample_products
    ):
        await dispatcher.on_created(sample_products[1])

        assert sent_event_types(publisher) == ["PRODUCT_CREATED"]
        wire = json.loads(publisher.send.await_args.kwargs["value"])
        assert wire["stock"] == 12
        assert wire["category"] == "clothes"

    @pytest.mark.asyncio
    async def test_on_updated_emits_updated_snapshot(
        self, dispatcher, publisher, sample_products
    ):
        await dispatcher.on_updated(sample_products[2])

        assert sent_event_types(publisher) == ["PRODUCT_UPDATED"]
        assert publisher.send.await_args.kwargs["key"] == "3"

    @pytest.mark.asyncio
    async def test_on_deleted_emits_id_only_envelope(self, dispatcher, publisher):
        await dispatcher.on_deleted(8)

        wire = json.loads(publisher.send.await_args.kwargs["value"])
        assert wire["id"] == 8
        assert wire["eventType"] == "PRODUCT_DELETED"
        assert wire["stock"] is None

    @pytest.mark.asyncio
    async def test_broker_failure_does_not_reach_caller(
        self, dispatcher, publisher, sample_products
    ):
        publisher.send.side_effect = KafkaTimeoutError()

        await dispatcher.on_created(sample_products[0])
        await dispatcher.on_deleted(1)

        assert publisher.send.await_count == 2

    @pytest.mark.asyncio
    async def test_emitter_fault_does_not_reach_caller(self, sample_products):
        producer = Mock(spec=ProductEventProducer)
        producer.build_message = Mock(side_effect=EventPublishError("bad snapshot"))
        producer.publish = AsyncMock()
        dispatcher = ProductChangeDispatcher(
            producer=producer,
            product_store=Mock(spec=AuthoritativeProductStore),
            operation_options=OperationLoggingOptions(audit_enabled=False),
        )

        await dispatcher.on_updated(sample_products[0])

        producer.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_publish_fault_does_not_reach_caller(self):
        producer = Mock(spec=ProductEventProducer)
        producer.publish = AsyncMock(side_effect=EventPublishError("serialization"))
        dispatcher = ProductChangeDispatcher(
            producer=producer, product_store=Mock(spec=AuthoritativeProductStore)
        )

        await dispatcher.on_deleted(5)

        producer.publish.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_product_is_rejected(self, dispatcher, publisher):
        with pytest.raises(ValueError):
            await dispatcher.on_created(None)

        publisher.send.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("product_id", [0, -4])
    async def test_non_positive_delete_id_is_rejected(
        self, dispatcher, publisher, product_id
    ):
        with pytest.raises(ValueError):
            await dispatcher.on_deleted(product_id)

        publisher.send.assert_not_called()


class TestCatalogResync:
    @pytest.mark.asyncio
    async def test_force_resync_publishes_every_product(
        self, dispatcher, publisher
    ):
        result = await dispatcher.on_force_resync()

        assert result == SyncResult(
            success=True,
            records_published=3,
            message="Full product synchronization completed successfully",
            details="3 products sent to Kafka topic",
        )
        assert sent_event_types(publisher) == [ProductEventType.INITIAL_LOAD.value] * 3
        publisher.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_force_resync_of_empty_catalog(
        self, dispatcher, publisher, product_store
    ):
        product_store.list_all.return_value = []

        result = await dispatcher.on_force_resync()

        assert result.success is True
        assert result.records_published == 0
        assert result.details == "0 products synchronized"
        publisher.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_force_resync_reports_store_failure(
        self, dispatcher, publisher, product_store
    ):
        product_store.list_all.side_effect = RuntimeError("database gone")

        result = await dispatcher.on_force_resync()

        assert result.success is False
        assert result.details == "Synchronization failed"
        assert "database gone" in result.message
        publisher.send.assert_not_called()

    @pytest.mark.asyncio
    async def test_force_resync_reports_emitter_failure(
        self, dispatcher, product_store, sample_products
    ):
        sample_products[1].stock = -1

        result = await dispatcher.on_force_resync()

        assert result.success is False
        assert result.records_published == 0

    @pytest.mark.asyncio
    async def test_force_resync_fails_when_kafka_is_unavailable(
        self, dispatcher, publisher
    ):
        publisher.send = AsyncMock(return_value=None)

        result = await dispatcher.on_force_resync()

        assert result.success is False
        assert result.records_published == 0
        assert result.details == "0 products sent to Kafka topic, 3 not sent"
        assert "Kafka unavailable" in result.message

    @pytest.mark.asyncio
    async def test_force_resync_counts_partial_publish(self, dispatcher, publisher):
        delivered = publisher.send.side_effect

        def flaky(topic, key, value):
            if key == "3":
                raise KafkaTimeoutError()
            return delivered(topic, key, value)

        publisher.send.side_effect = flaky

        result = await dispatcher.on_force_resync()

        assert result.success is False
        assert result.records_published == 2
        assert result.details == "2 products sent to Kafka topic, 1 not sent"

    @pytest.mark.asyncio
    async def test_startup_sync_runs_once(self, dispatcher, publisher, product_store):
        await dispatcher.on_startup()
        await dispatcher.on_startup()

        product_store.list_all.assert_awaited_once()
        assert publisher.send.await_count == 3

    @pytest.mark.asyncio
    async def test_startup_sync_failure_is_absorbed(self, dispatcher, product_store):
        product_store.list_all.side_effect = RuntimeError("database gone")

        await dispatcher.on_startup()

        assert (await dispatcher.sync_status())["startup_sync_done"] is True

    @pytest.mark.asyncio
    async def test_sync_status(self, dispatcher):
        status = await dispatcher.sync_status()

        assert status["total_products"] == 3
        assert status["topic"] == "product"
        assert status["categories"] == ["general", "clothes", "electronics", "smartphone"]
        assert status["startup_sync_done"] is False
