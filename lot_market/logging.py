"""Logging setup for lot-market.

Engine modules log every committed lot operation at INFO and pass the lot
context through ``extra=lot_extra(...)``. The JSON formatter lifts those
attributes into top-level fields so log pipelines can filter by lot.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOT_FIELDS = ("lot_id", "caller", "status")
NOISY_LOGGERS = ("confluent_kafka", "psycopg", "faker")


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """Configure the root logger and the ``lot_market`` logger.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names
        fall back to INFO.
    format_type : str
        "standard" for human-readable lines or "json" for one JSON object
        per line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("lot_market").setLevel(log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def lot_extra(lot_id: int, caller: str | None = None, status: Any = None) -> dict[str, Any]:
    """Build the ``extra=`` mapping for a log call about one lot."""
    extra: dict[str, Any] = {"lot_id": lot_id}
    if caller is not None:
        extra["caller"] = caller
    if status is not None:
        extra["status"] = getattr(status, "value", status)
    return extra


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with lot context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in LOT_FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (usually ``__name__``)."""
    return logging.getLogger(name)
