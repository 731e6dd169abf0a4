"""
Order Service Event Management
Initializes and manages the product replica consumer.
"""

from typing import Optional

from ..events.consumers import (
    ProductEventReconciler,
    ProductSyncConsumer,
    TransportRetryPolicy,
)
from ..middleware.common.operation_logging import OperationLoggingOptions
from ..repository.product_replica_repository import (
    ReplicaStore,
    SqlAlchemyReplicaStore,
)
from ..utils.logging import setup_order_logging as setup_logging
from .database import database_manager
from .setting import get_settings

logger = setup_logging("order_service.events", log_level=get_settings().LOG_LEVEL)

# Global instances
_replica_store: Optional[ReplicaStore] = None
_product_sync_consumer: Optional[ProductSyncConsumer] = None


async def init_events() -> None:
    """Build the replica pipeline and start consuming the product topic"""
    global _replica_store, _product_sync_consumer

    settings = get_settings()

    _replica_store = SqlAlchemyReplicaStore(database_manager.async_session_maker)
    reconciler = ProductEventReconciler(
        replica_store=_replica_store,
        create_on_missing=settings.REPLICA_CREATE_ON_MISSING,
        operation_options=OperationLoggingOptions.from_settings(settings),
    )
    _product_sync_consumer = ProductSyncConsumer(
        handler=reconciler,
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        topic=settings.KAFKA_TOPIC_PRODUCT,
        group_id=settings.KAFKA_GROUP_ID,
        client_id=f"{settings.SERVICE_NAME}-product-sync",
        retry_policy=TransportRetryPolicy(
            max_retries=settings.PRODUCT_SYNC_MAX_RETRIES,
            backoff_seconds=settings.PRODUCT_SYNC_RETRY_BACKOFF_SECONDS,
        ),
        commit_interval_ms=settings.KAFKA_COMMIT_INTERVAL_MS,
        session_timeout_ms=settings.KAFKA_SESSION_TIMEOUT_MS,
        heartbeat_interval_ms=settings.KAFKA_HEARTBEAT_INTERVAL_MS,
        max_poll_records=settings.KAFKA_MAX_POLL_RECORDS,
        max_poll_interval_ms=settings.KAFKA_MAX_POLL_INTERVAL_MS,
    )

    try:
        await _product_sync_consumer.start(
            timeout=settings.KAFKA_CONSUMER_START_TIMEOUT
        )
    except Exception as e:
        logger.warning(
            "Product sync consumer failed to start, replica will go stale",
            extra={"operation": "init_events_failed", "error": str(e)},
        )


async def close_events() -> None:
    global _replica_store, _product_sync_consumer

    try:
        if _product_sync_consumer:
            await _product_sync_consumer.stop()
    except Exception as e:
        logger.error(
            "Error closing product sync consumer",
            extra={"operation": "close_events_error", "error": str(e)},
        )
    finally:
        _replica_store = None
        _product_sync_consumer = None


def get_product_sync_consumer() -> Optional[ProductSyncConsumer]:
    return _product_sync_consumer


def get_replica_store() -> Optional[ReplicaStore]:
    return _replica_store


async def health_check_events() -> bool:
    """True while the consumer task is running"""
    return bool(_product_sync_consumer and _product_sync_consumer.running)
