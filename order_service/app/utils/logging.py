"""
Order Service Logging Module
============================
Structured JSON logging for the Order Service and its product replica consumer.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class OrderJSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` fields land at the top level"""

    def __init__(self, exclude_fields: Optional[List[str]] = None):
        super().__init__()
        self.exclude_fields = set(exclude_fields or [])

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": "order_service",
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and key not in self.exclude_fields:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_order_logging(
    service_name: str = "order_service",
    log_level: str = "INFO",
    enable_file_logging: bool = False,
    log_dir: Optional[str] = None,
    max_file_size: int = 100 * 1024 * 1024,  # 100MB
    backup_count: int = 5,
    exclude_fields: Optional[List[str]] = None,
) -> logging.Logger:
    """Setup independent logging for Order Service"""
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()

    json_formatter = OrderJSONFormatter(exclude_fields=exclude_fields)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(json_formatter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        log_dir_path = (
            Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
        )
        log_dir_path.mkdir(exist_ok=True)

        for suffix, handler_level in (("", level), ("_errors", logging.ERROR)):
            file_handler = RotatingFileHandler(
                log_dir_path / f"{service_name}{suffix}.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
            )
            file_handler.setLevel(handler_level)
            file_handler.setFormatter(json_formatter)
            logger.addHandler(file_handler)

    return logger
