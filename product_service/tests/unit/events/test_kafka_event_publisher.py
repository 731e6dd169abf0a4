from unittest.mock import AsyncMock, Mock, patch

import pytest
from aiokafka.errors import KafkaConnectionError

from product_service.app.events.base.kafka_client import KafkaEventPublisher


def make_publisher(**kwargs):
    return KafkaEventPublisher(
        bootstrap_servers="localhost:9092",
        client_id="product-service-producer",
        max_retries=3,
        retry_delay=0.5,
        **kwargs,
    )


class TestKafkaEventPublisher:
    @pytest.mark.asyncio
    async def test_send_before_start_is_degraded(self):
        assert await make_publisher().send("product", key="1", value=b"{}") is None

    @pytest.mark.asyncio
    async def test_send_before_start_raises_without_degradation(self):
        with pytest.raises(KafkaConnectionError):
            await make_publisher(enable_graceful_degradation=False).send(
                "product", key="1", value=b"{}"
            )

    @pytest.mark.asyncio
    async def test_start_backs_off_then_degrades(self):
        events = make_publisher()
        producer = Mock()
        producer.start = AsyncMock(side_effect=KafkaConnectionError())

        with patch.object(events, "_build_producer", return_value=producer), patch(
            "product_service.app.events.base.kafka_client.asyncio.sleep",
            new=AsyncMock(),
        ) as sleep:
            await events.start(timeout=1.0)

        assert producer.start.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [0.5, 1.0]
        assert events.is_connected is False
        assert await events.health_check() is False

    @pytest.mark.asyncio
    async def test_connected_send_returns_delivery_future(self):
        events = make_publisher()
        producer = Mock()
        producer.start = AsyncMock()
        delivery = object()
        producer.send = AsyncMock(return_value=delivery)

        with patch.object(events, "_build_producer", return_value=producer):
            await events.start()

        assert await events.send("product", key="7", value=b"{}") is delivery
        producer.send.assert_awaited_once_with("product", value=b"{}", key="7")

    @pytest.mark.asyncio
    async def test_connect_retries_the_given_producer(self):
        events = make_publisher()
        producer = Mock()
        producer.start = AsyncMock(side_effect=[KafkaConnectionError(), None])

        with patch(
            "product_service.app.events.base.kafka_client.asyncio.sleep",
            new=AsyncMock(),
        ):
            connected = await events._connect(producer, timeout=1.0)

        assert connected is True
        assert producer.start.await_count == 2
        assert events.producer is None
