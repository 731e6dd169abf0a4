"""
Product Service Event Management
Initializes and manages Kafka event publishing for the product service.
"""

import socket
from typing import Optional

from ..events.base.kafka_client import KafkaEventPublisher
from ..events.change_dispatcher import ProductChangeDispatcher
from ..events.event_producers import ProductEventProducer
from ..middleware.common.operation_logging import OperationLoggingOptions
from ..repository.product_repository import SessionProductStore
from ..utils.logging import setup_product_logging as setup_logging
from .database import database_manager
from .setting import get_settings

logger = setup_logging("product_service.events", log_level=get_settings().LOG_LEVEL)

# Global instances
_kafka_publisher: Optional[KafkaEventPublisher] = None
_product_event_producer: Optional[ProductEventProducer] = None
_change_dispatcher: Optional[ProductChangeDispatcher] = None


def _kafka_reachable(bootstrap_servers: str, timeout: float = 1.0) -> bool:
    """Quick TCP probe of the first bootstrap server"""
    first_server = bootstrap_servers.split(",")[0].strip()
    if ":" not in first_server:
        return False
    host, port = first_server.rsplit(":", 1)
    try:
        with socket.create_connection((host, int(port)), timeout=timeout):
            return True
    except (OSError, ValueError):
        return False


async def init_events() -> None:
    """Initialize event publishing infrastructure"""
    global _kafka_publisher, _product_event_producer, _change_dispatcher

    settings = get_settings()

    logger.info(
        "Initializing event publishing infrastructure",
        extra={
            "operation": "init_events",
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "topic": settings.KAFKA_TOPIC_PRODUCT,
        },
    )

    _kafka_publisher = KafkaEventPublisher(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        client_id=f"{settings.SERVICE_NAME}-producer",
        max_retries=settings.KAFKA_PRODUCER_MAX_RETRIES,
        retry_delay=settings.KAFKA_PRODUCER_RETRY_DELAY,
        enable_graceful_degradation=settings.KAFKA_GRACEFUL_DEGRADATION,
    )

    if _kafka_reachable(settings.KAFKA_BOOTSTRAP_SERVERS):
        try:
            await _kafka_publisher.start(timeout=settings.KAFKA_CONNECT_TIMEOUT)
            if _kafka_publisher.is_connected:
                await _kafka_publisher.ensure_topic_exists(settings.KAFKA_TOPIC_PRODUCT)
        except Exception as e:
            logger.warning(
                "Event publishing initialization failed - operating in degraded mode",
                extra={"operation": "init_events_failed", "error": str(e)},
            )
    else:
        logger.warning(
            "Kafka not available, product events will be logged but not published",
            extra={"operation": "init_events", "degraded_mode": True},
        )

    _product_event_producer = ProductEventProducer(
        _kafka_publisher, topic=settings.KAFKA_TOPIC_PRODUCT
    )
    _change_dispatcher = ProductChangeDispatcher(
        producer=_product_event_producer,
        product_store=SessionProductStore(database_manager.async_session_maker),
        operation_options=OperationLoggingOptions.from_settings(settings),
    )

    logger.info(
        "Event publishing infrastructure initialized",
        extra={
            "operation": "init_events_complete",
            "kafka_connected": _kafka_publisher.is_connected,
        },
    )


async def close_events() -> None:
    """Close event publishing infrastructure"""
    global _kafka_publisher, _product_event_producer, _change_dispatcher

    try:
        if _kafka_publisher:
            await _kafka_publisher.stop()
            logger.info(
                "Event publishing infrastructure closed",
                extra={"operation": "close_events_complete"},
            )
    except Exception as e:
        logger.error(
            "Error closing event infrastructure",
            extra={"operation": "close_events_error", "error": str(e)},
        )
    finally:
        _kafka_publisher = None
        _product_event_producer = None
        _change_dispatcher = None


def get_change_dispatcher() -> Optional[ProductChangeDispatcher]:
    """Get the product change dispatcher instance"""
    return _change_dispatcher


async def health_check_events() -> bool:
    """Check if event publishing is healthy"""
    if _kafka_publisher:
        return await _kafka_publisher.health_check()
    return False
