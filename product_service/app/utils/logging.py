"""
Product Service Logging Module
==============================
Structured JSON logging for the Product Service and its catalog sync pipeline.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class ProductJSONFormatter(logging.Formatter):
    """JSON formatter emitting one object per record with the ``extra`` fields inlined"""

    def __init__(self, exclude_fields: Optional[List[str]] = None):
        super().__init__()
        self.exclude_fields = set(exclude_fields or [])

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": "product_service",
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_FIELDS or key in self.exclude_fields:
                continue
            log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_product_logging(
    service_name: str = "product_service",
    log_level: str = "INFO",
    enable_file_logging: bool = False,
    log_dir: Optional[str] = None,
    max_file_size: int = 100 * 1024 * 1024,  # 100MB
    backup_count: int = 5,
    exclude_fields: Optional[List[str]] = None,
) -> logging.Logger:
    """
    Configure and return a Product Service logger.

    Calling it again for the same name replaces the handlers instead of
    stacking them, so modules can call it at import time.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()

    json_formatter = ProductJSONFormatter(exclude_fields=exclude_fields)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(json_formatter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        log_dir_path = (
            Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
        )
        log_dir_path.mkdir(exist_ok=True)

        file_handler = RotatingFileHandler(
            log_dir_path / f"{service_name}.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(json_formatter)
        logger.addHandler(file_handler)

        error_handler = RotatingFileHandler(
            log_dir_path / f"{service_name}_errors.log",
            maxBytes=max_file_size,
            backupCount=backup_count,
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(json_formatter)
        logger.addHandler(error_handler)

    logger.debug(
        "Product Service logging configured",
        extra={
            "log_level": log_level,
            "file_logging": enable_file_logging,
            "handlers": len(logger.handlers),
        },
    )

    return logger
