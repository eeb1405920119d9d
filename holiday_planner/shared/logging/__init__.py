"""Logging configuration and utilities."""

from holiday_planner.shared.logging.config import (
    setup_logging,
    log_request_transition,
    StructuredFormatter,
)

__all__ = [
    "setup_logging",
    "log_request_transition",
    "StructuredFormatter",
]
