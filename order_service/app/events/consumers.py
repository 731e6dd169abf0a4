"""
Order service consumer for product change events.

The catalog service publishes a ``ProductMessage`` for every committed
product change. ``ProductEventReconciler`` applies those envelopes to the
local ``product_replicas`` table and ``ProductSyncConsumer`` feeds it from
Kafka one record at a time.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

from aiokafka import AIOKafkaConsumer, TopicPartition  # type: ignore
from aiokafka.errors import KafkaConnectionError, KafkaError  # type: ignore
from sqlalchemy.exc import OperationalError

from ..core.setting import get_settings
from ..middleware.common.operation_logging import (
    OperationLoggingOptions,
    audited,
    timed,
)
from ..repository.product_replica_repository import ReplicaStore
from ..utils.logging import setup_order_logging as setup_logging
from .base import (
    MalformedMessageError,
    ReconcileOutcome,
    RecordHandler,
    TransientTransportError,
)
from .schemas import ProductEventType, ProductMessage

logger = setup_logging(
    "order_service.events.product_sync", log_level=get_settings().LOG_LEVEL
)

T = TypeVar("T")

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    KafkaError,
    OperationalError,
    TransientTransportError,
)


@dataclass(frozen=True)
class TransportRetryPolicy:
    """Fixed-backoff retry for transient faults around a single record"""

    max_retries: int = 3
    backoff_seconds: float = 1.0
    retryable: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS

    def is_retryable(self, error: BaseException) -> bool:
        if isinstance(error, MalformedMessageError):
            return False
        return isinstance(error, self.retryable)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Optional[Dict[str, Any]] = None,
    ) -> T:
        """Run ``operation``, retrying up to ``max_retries`` times on transient faults"""
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as e:
                if not self.is_retryable(e) or attempt >= self.max_retries:
                    raise
                attempt += 1
                logger.warning(
                    f"Transient fault, retrying in {self.backoff_seconds}s",
                    extra={
                        **(context or {}),
                        "attempt": attempt,
                        "max_retries": self.max_retries,
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "operation": "product_sync_retry",
                    },
                )
                await asyncio.sleep(self.backoff_seconds)


class ProductEventReconciler(RecordHandler):
    """
    Applies product change envelopes to the replica store.

    Snapshot kinds (created, updated, initial load) set the stock of an
    existing replica. A snapshot for an id the replica has never seen is
    logged and skipped unless ``create_on_missing`` is set, in which case
    the whole snapshot is inserted. Deletes remove the row if present.
    Every path is idempotent, so redelivered records are harmless.
    """

    def __init__(
        self,
        replica_store: ReplicaStore,
        create_on_missing: bool = False,
        operation_options: Optional[OperationLoggingOptions] = None,
    ):
        self.replica_store = replica_store
        self.create_on_missing = create_on_missing
        self.operation_options = operation_options or OperationLoggingOptions()

    @timed("product_event_reconcile")
    async def process(
        self,
        raw: bytes,
        key: Optional[bytes] = None,
        partition: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ReconcileOutcome:
        """
        Reconcile one raw record.

        Raises:
            MalformedMessageError: the record cannot be decoded
            TRANSIENT_ERRORS: the store or transport failed in a retryable way
        """
        message = ProductMessage.from_bytes(raw)
        log_context = {
            "product_id": message.id,
            "product_event_type": message.event_type,
            "partition": partition,
            "offset": offset,
        }

        kind = message.kind
        if kind is None:
            logger.warning(
                f"Unknown product event type: {message.event_type}",
                extra={**log_context, "operation": "reconcile_unknown_kind"},
            )
            return ReconcileOutcome.REJECTED

        logger.info(
            "Received product event",
            extra={**log_context, "operation": "reconcile_received"},
        )

        try:
            if kind is ProductEventType.DELETED:
                return await self._apply_delete(message)
            return await self._apply_upsert(message)
        except TRANSIENT_ERRORS:
            raise
        except Exception as e:
            logger.error(
                "Failed to apply product event",
                extra={
                    **log_context,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "operation": "reconcile_apply_failed",
                },
                exc_info=True,
            )
            return ReconcileOutcome.REJECTED

    @audited("replica_upsert")
    async def _apply_upsert(self, message: ProductMessage) -> ReconcileOutcome:
        if message.stock is None:
            logger.warning(
                "Product snapshot carries no stock, ignoring",
                extra={"product_id": message.id, "operation": "reconcile_upsert"},
            )
            return ReconcileOutcome.REJECTED

        updated = await self.replica_store.upsert_stock(
            message.id, message.stock, event_type=message.event_type
        )
        if updated:
            logger.info(
                "Replica stock updated",
                extra={
                    "product_id": message.id,
                    "product_event_type": message.event_type,
                    "stock": message.stock,
                    "operation": "reconcile_upsert",
                },
            )
            return ReconcileOutcome.APPLIED

        if self.create_on_missing:
            await self.replica_store.insert_snapshot(message)
            logger.info(
                "Replica created from snapshot",
                extra={
                    "product_id": message.id,
                    "product_event_type": message.event_type,
                    "operation": "reconcile_insert",
                },
            )
            return ReconcileOutcome.APPLIED

        logger.warning(
            "Product not found in replica, a message cannot create a product",
            extra={"product_id": message.id, "operation": "reconcile_upsert"},
        )
        return ReconcileOutcome.SKIPPED

    @audited("replica_delete")
    async def _apply_delete(self, message: ProductMessage) -> ReconcileOutcome:
        if await self.replica_store.delete(message.id):
            logger.info(
                "Replica deleted",
                extra={
                    "product_id": message.id,
                    "product_event_type": message.event_type,
                    "operation": "reconcile_delete",
                },
            )
            return ReconcileOutcome.APPLIED

        logger.info(
            "Product already absent from replica, nothing to delete",
            extra={"product_id": message.id, "operation": "reconcile_delete"},
        )
        return ReconcileOutcome.SKIPPED


class ProductSyncConsumer:
    """
    Single-task Kafka consumer feeding product records to a handler.

    Offsets are committed manually and only for records the handler has
    finished with, at most once every ``commit_interval_ms`` and again on
    ``stop``. A crash between apply and commit redelivers the record, which
    the idempotent reconciler absorbs.
    """

    def __init__(
        self,
        handler: RecordHandler,
        bootstrap_servers: str,
        topic: str,
        group_id: str,
        client_id: str,
        retry_policy: Optional[TransportRetryPolicy] = None,
        commit_interval_ms: int = 1000,
        session_timeout_ms: int = 30000,
        heartbeat_interval_ms: int = 10000,
        max_poll_records: int = 500,
        max_poll_interval_ms: int = 300000,
        enable_graceful_degradation: bool = True,
    ):
        self.handler = handler
        self.bootstrap_servers = bootstrap_servers
        self.topic = topic
        self.group_id = group_id
        self.client_id = client_id
        self.retry_policy = retry_policy or TransportRetryPolicy()
        self.commit_interval_ms = commit_interval_ms
        self.session_timeout_ms = session_timeout_ms
        self.heartbeat_interval_ms = heartbeat_interval_ms
        self.max_poll_records = max_poll_records
        self.max_poll_interval_ms = max_poll_interval_ms
        self.enable_graceful_degradation = enable_graceful_degradation

        self.consumer: Optional[AIOKafkaConsumer] = None
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self._record_lock = asyncio.Lock()
        self._processed: Dict[TopicPartition, int] = {}
        self._last_commit = time.monotonic()
        self.outcomes: Dict[str, int] = {
            **{outcome.value: 0 for outcome in ReconcileOutcome},
            "malformed": 0,
            "dropped": 0,
        }

    def _create_consumer(self) -> AIOKafkaConsumer:
        return AIOKafkaConsumer(
            self.topic,
            bootstrap_servers=self.bootstrap_servers,
            group_id=self.group_id,
            client_id=self.client_id,
            enable_auto_commit=False,
            auto_offset_reset="earliest",
            session_timeout_ms=self.session_timeout_ms,
            heartbeat_interval_ms=self.heartbeat_interval_ms,
            max_poll_records=self.max_poll_records,
            max_poll_interval_ms=self.max_poll_interval_ms,
        )

    async def start(self, timeout: float = 30.0) -> None:
        """Connect and start the consuming task; degrade instead of failing if allowed"""
        consumer = self._create_consumer()
        try:
            await asyncio.wait_for(consumer.start(), timeout=timeout)
        except (KafkaConnectionError, asyncio.TimeoutError) as e:
            if not self.enable_graceful_degradation:
                raise
            logger.error(
                "Failed to connect product sync consumer. "
                "Running in degraded mode (replica will not be updated)",
                extra={
                    "topic": self.topic,
                    "error": str(e),
                    "operation": "consumer_start_failed",
                },
            )
            return

        self.consumer = consumer
        self.running = True
        self._last_commit = time.monotonic()
        self._task = asyncio.create_task(self._consume_messages(consumer))
        logger.info(
            "Product sync consumer started",
            extra={
                "topic": self.topic,
                "group_id": self.group_id,
                "operation": "consumer_start",
            },
        )

    async def stop(self) -> None:
        """Finish the in-flight record, commit what was processed, then disconnect"""
        self.running = False

        if self._task is not None:
            async with self._record_lock:
                self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self.consumer is not None:
            await self.commit_processed()
            try:
                await self.consumer.stop()
            except Exception as e:
                logger.warning(
                    "Error stopping product sync consumer",
                    extra={"error": str(e), "operation": "consumer_stop_error"},
                )
            self.consumer = None

        logger.info("Product sync consumer stopped", extra={"topic": self.topic})

    async def handle_record(self, record: Any) -> Optional[ReconcileOutcome]:
        """
        Process one consumer record, retrying transient faults.

        Never raises: malformed records and records that keep failing are
        logged and dropped so the partition keeps moving.
        """
        context = {
            "topic": getattr(record, "topic", self.topic),
            "partition": record.partition,
            "offset": record.offset,
        }

        try:
            outcome = await self.retry_policy.run(
                lambda: self.handler.process(
                    record.value,
                    key=record.key,
                    partition=record.partition,
                    offset=record.offset,
                ),
                context=context,
            )
        except MalformedMessageError as e:
            self.outcomes["malformed"] += 1
            logger.error(
                "Dropping malformed product record",
                extra={**context, "error": str(e), "operation": "record_malformed"},
            )
            return None
        except Exception as e:
            self.outcomes["dropped"] += 1
            logger.error(
                "Dropping product record after retries were exhausted",
                extra={
                    **context,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "operation": "record_dropped",
                },
            )
            return None

        self.outcomes[outcome.value] += 1
        return outcome

    def _mark_processed(self, record: Any) -> None:
        partition = TopicPartition(getattr(record, "topic", self.topic), record.partition)
        self._processed[partition] = record.offset + 1

    def _commit_due(self) -> bool:
        return (time.monotonic() - self._last_commit) * 1000 >= self.commit_interval_ms

    async def commit_processed(self) -> None:
        """Commit the next offset after every handled record; failures only cause redelivery"""
        if self.consumer is None or not self._processed:
            return

        offsets = dict(self._processed)
        try:
            await self.consumer.commit(offsets)
        except KafkaError as e:
            logger.warning(
                "Failed to commit product sync offsets, records may be redelivered",
                extra={
                    "topic": self.topic,
                    "error": str(e),
                    "operation": "consumer_commit_failed",
                },
            )
        finally:
            self._processed.clear()
            self._last_commit = time.monotonic()

    async def _consume_messages(self, consumer: AIOKafkaConsumer) -> None:
        try:
            async for record in consumer:
                if not self.running:
                    break
                async with self._record_lock:
                    await self.handle_record(record)
                    self._mark_processed(record)
                if self._commit_due():
                    await self.commit_processed()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.running = False
            logger.error(
                "Product sync consumer loop failed",
                extra={"topic": self.topic, "error": str(e), "operation": "consumer_error"},
                exc_info=True,
            )

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "topic": self.topic,
            "group_id": self.group_id,
            "outcomes": dict(self.outcomes),
        }
