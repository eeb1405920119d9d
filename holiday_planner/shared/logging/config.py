"""
Logging configuration.

Provides the text and JSON log formats and a helper for recording
request pipeline transitions.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("httpcore", "httpx", "openai")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs log records as JSON.

    Each log entry includes:
    - timestamp: ISO format datetime (UTC)
    - level: Log level name
    - logger: Logger name
    - message: Log message
    - extra: Any additional fields attached by log_request_transition
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_entry["extra"] = record.extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure the root logger for the service.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
        json_logs: Use StructuredFormatter instead of the pipe-separated text format
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_logs:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_request_transition(
    event: str,
    state: Dict[str, Any],
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log an AI request pipeline transition.

    Args:
        event: Name of the transition (e.g. "validated", "cache_hit")
        state: Current request state (key fields are extracted)
        extra: Additional context to include in the log
        logger: Logger instance to use. Defaults to the package logger.
    """
    if logger is None:
        logger = logging.getLogger("holiday_planner")

    log_data = {
        "event": event,
        "state_summary": {
            "request_id": state.get("request_id"),
            "operation": state.get("operation"),
            "use_cache": state.get("use_cache"),
            "cached": state.get("cached"),
        },
    }
    if extra:
        log_data["extra"] = extra

    record = logger.makeRecord(
        logger.name,
        logging.INFO,
        "",
        0,
        f"Request transition: {event}",
        args=(),
        exc_info=None,
    )
    record.extra = log_data

    logger.handle(record)
