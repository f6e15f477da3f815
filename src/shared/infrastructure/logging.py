"""
Structured Logging
==================

One JSON object per log line, stamped with service context.

Modules log through the standard library and pass structured context as
``extra``:

    from src.shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Complaint transitioned", extra={"complaint_id": "KSC-0001"})
"""

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

from pythonjsonlogger import jsonlogger

_REDACTED = "***REDACTED***"
_SENSITIVE_MARKERS = ("password", "token", "api_key", "otp", "secret")
_NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """
    Adds a UTC timestamp, service name, environment and (when present) the
    request correlation id to every record. String fields whose name looks
    like a credential are masked.
    """

    def __init__(self, *args: Any, service: str = "unknown", environment: str = "unknown", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._service = service
        self._environment = environment

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        log_record["service"] = self._service
        log_record["environment"] = self._environment

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        for key, value in list(log_record.items()):
            if isinstance(value, str) and any(marker in key.lower() for marker in _SENSITIVE_MARKERS):
                log_record[key] = _REDACTED


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
    service: str = "complaint-sla-service",
) -> None:
    """Route the root logger to stdout as JSON. Replaces existing handlers."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ServiceJsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        service=service,
        environment=environment,
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


@contextmanager
def log_latency(logger: logging.Logger, operation: str, **context: Any) -> Iterator[None]:
    """
    Log ``<operation> completed`` with its wall time once the block exits,
    including when it raises.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.info(
            f"{operation} completed",
            extra={
                "operation": operation,
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                **context,
            },
        )
