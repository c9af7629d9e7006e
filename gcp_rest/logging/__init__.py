"""
Logging utilities for the REST clients.
"""

from .logger import (
    CloudLoggingJSONFormatter,
    StructuredLogger,
    get_logger,
    get_structured_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
    setup_logger,
)

__all__ = [
    "CloudLoggingJSONFormatter",
    "StructuredLogger",
    "get_logger",
    "get_structured_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "setup_logger",
]
