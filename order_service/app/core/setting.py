"""
Order Service configuration
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

ORDER_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = ORDER_SERVICE_DIR / ".env"


class OrderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Order Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    SERVICE_NAME: str = "order-service"

    # Database
    ORDER_DATABASE_URL: str = "sqlite+aiosqlite:///./order_service.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Security
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"

    # Kafka product replica consumer
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"
    KAFKA_TOPIC_PRODUCT: str = "product"
    KAFKA_GROUP_ID: str = "order-service-product-sync"
    KAFKA_COMMIT_INTERVAL_MS: int = 1000
    KAFKA_SESSION_TIMEOUT_MS: int = 30000
    KAFKA_HEARTBEAT_INTERVAL_MS: int = 10000
    KAFKA_MAX_POLL_RECORDS: int = 500
    KAFKA_MAX_POLL_INTERVAL_MS: int = 300000
    KAFKA_CONSUMER_START_TIMEOUT: float = 30.0

    # Per-record retry for transient faults
    PRODUCT_SYNC_MAX_RETRIES: int = 3
    PRODUCT_SYNC_RETRY_BACKOFF_SECONDS: float = 1.0

    # Insert the full snapshot when an upsert targets a replica that does not exist
    REPLICA_CREATE_ON_MISSING: bool = False

    # Operation logging
    AUDIT_ENABLED: bool = True
    AUDIT_LOG_PARAMETERS: bool = True
    PERFORMANCE_ENABLED: bool = True
    PERFORMANCE_WARNING_THRESHOLD_MS: int = 1000
    PERFORMANCE_DETAILED_LOGGING: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]


_settings_instance = None


def get_settings() -> OrderSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = OrderSettings()
    return _settings_instance
