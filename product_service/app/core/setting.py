"""
Product Service configuration
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the product service directory path
PRODUCT_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = PRODUCT_SERVICE_DIR / ".env"


class ProductSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Product Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Service specific
    SERVICE_NAME: str = "product-service"

    # Database
    PRODUCT_DATABASE_URL: str = "sqlite+aiosqlite:///./product_service.db"
    DATABASE_POOL_SIZE: int = 25
    DATABASE_MAX_OVERFLOW: int = 50

    # Security
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"
    KAFKA_TOPIC_PRODUCT: str = "product"
    KAFKA_PRODUCER_MAX_RETRIES: int = 20
    KAFKA_PRODUCER_RETRY_DELAY: float = 2.0
    KAFKA_CONNECT_TIMEOUT: float = 30.0
    KAFKA_GRACEFUL_DEGRADATION: bool = True

    # Catalog sync
    SYNC_ON_STARTUP: bool = True

    # Operation logging (audit / execution time / parameter validation)
    AUDIT_ENABLED: bool = True
    AUDIT_LOG_PARAMETERS: bool = True
    AUDIT_LOG_RESULTS: bool = False
    PERFORMANCE_ENABLED: bool = True
    PERFORMANCE_WARNING_THRESHOLD_MS: int = 1000
    PERFORMANCE_DETAILED_LOGGING: bool = False
    VALIDATION_ENABLED: bool = True

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]


# Create a singleton instance
_settings_instance = None


def get_settings() -> ProductSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ProductSettings()
    return _settings_instance
