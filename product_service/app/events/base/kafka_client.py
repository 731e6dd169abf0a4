import asyncio
from typing import Optional

from aiokafka import AIOKafkaProducer  # type: ignore
from aiokafka.admin import AIOKafkaAdminClient, NewTopic  # type: ignore
from aiokafka.errors import KafkaConnectionError, KafkaError  # type: ignore

from ...core.setting import get_settings
from ...utils.logging import setup_product_logging as setup_logging
from . import EventPublisher

logger = setup_logging(
    "product_service.events.kafka", log_level=get_settings().LOG_LEVEL
)


class KafkaEventPublisher(EventPublisher):
    """
    Keyed record publisher for the product topic.

    ``start`` retries the broker connection with exponential backoff. When
    every attempt fails and graceful degradation is on, the publisher stays
    disconnected and ``send`` returns ``None`` so callers can log the record
    instead. Records with the same key keep their publish order because they
    land on the same partition.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        max_retries: int = 20,
        retry_delay: float = 2.0,
        enable_graceful_degradation: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.enable_graceful_degradation = enable_graceful_degradation
        self.producer: Optional[AIOKafkaProducer] = None
        self.is_connected = False
        self._connection_lock = asyncio.Lock()

    def _build_producer(self) -> AIOKafkaProducer:
        return AIOKafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            client_id=self.client_id,
            key_serializer=lambda key: key.encode("utf-8") if key else None,
            acks="all",
            retry_backoff_ms=1000,
            request_timeout_ms=30000,
        )

    async def start(self, timeout: float = 30.0) -> None:
        async with self._connection_lock:
            if self.producer is not None and self.is_connected:
                return

            self.producer = self._build_producer()
            self.is_connected = await self._connect(self.producer, timeout)

            if self.is_connected:
                logger.info(
                    "Product event publisher connected",
                    extra={
                        "bootstrap_servers": self.bootstrap_servers,
                        "operation": "kafka_connect",
                    },
                )
                return

            logger.error(
                f"Gave up connecting to Kafka after {self.max_retries} attempts, "
                "product events will be logged but not published",
                extra={"operation": "kafka_connect", "degraded_mode": True},
            )
            if not self.enable_graceful_degradation:
                raise KafkaConnectionError(
                    f"Could not connect to Kafka at {self.bootstrap_servers}"
                )

    async def _connect(self, producer: AIOKafkaProducer, timeout: float) -> bool:
        for attempt in range(1, self.max_retries + 1):
            try:
                await asyncio.wait_for(producer.start(), timeout=timeout)
                return True
            except (KafkaConnectionError, asyncio.TimeoutError) as e:
                if attempt == self.max_retries:
                    break
                delay = self.retry_delay * 2 ** (attempt - 1)
                logger.warning(
                    f"Kafka connection attempt {attempt} failed, retrying in {delay}s",
                    extra={
                        "attempt": attempt,
                        "max_retries": self.max_retries,
                        "error": str(e),
                        "operation": "kafka_connect",
                    },
                )
                await asyncio.sleep(delay)
        return False

    async def ensure_topic_exists(self, topic_name: str, num_partitions: int = 1):
        admin_client = AIOKafkaAdminClient(bootstrap_servers=self.bootstrap_servers)
        await admin_client.start()
        try:
            if topic_name in await admin_client.list_topics():
                return
            await admin_client.create_topics(
                [
                    NewTopic(
                        name=topic_name,
                        num_partitions=num_partitions,
                        replication_factor=1,
                    )
                ]
            )
            logger.info(
                "Created Kafka topic",
                extra={"topic": topic_name, "operation": "create_topic"},
            )
        except KafkaError as e:
            logger.warning(
                "Could not verify Kafka topic",
                extra={"topic": topic_name, "error": str(e), "operation": "create_topic"},
            )
        finally:
            await admin_client.close()

    async def stop(self) -> None:
        """Flush pending records and stop the producer"""
        async with self._connection_lock:
            if self.producer is None:
                return
            try:
                await self.producer.stop()
                logger.info("Product event publisher stopped")
            except KafkaError as e:
                logger.warning(
                    "Error stopping Kafka producer",
                    extra={"error": str(e), "operation": "stop_producer"},
                )
            finally:
                self.producer = None
                self.is_connected = False

    async def send(
        self, topic: str, key: str, value: bytes
    ) -> Optional["asyncio.Future"]:
        """Enqueue a keyed record; the returned future resolves on broker ack"""
        if self.producer is None or not self.is_connected:
            if self.enable_graceful_degradation:
                return None
            raise KafkaConnectionError("Kafka producer not connected")

        return await self.producer.send(topic, value=value, key=key)

    async def flush(self) -> None:
        if self.producer is not None and self.is_connected:
            await self.producer.flush()

    async def health_check(self) -> bool:
        if self.producer is None or not self.is_connected:
            return False

        try:
            metadata = await self.producer.client.fetch_all_metadata()
        except KafkaError as e:
            logger.warning(
                "Kafka health check failed",
                extra={"error": str(e), "operation": "health_check"},
            )
            return False
        return len(metadata.brokers()) > 0
