"""Logging and error reporting used while resolving exporter configuration."""

from .logging import (
    LOG_FORMAT_CONSOLE,
    LOG_FORMAT_ENV,
    LOG_FORMAT_JSON,
    StructuredConsoleFormatter,
    StructuredJSONFormatter,
    get_logger,
    safe_extras,
)
from .reporting import ErrorReporter, LoggingErrorReporter, default_reporter

__all__ = [
    "LOG_FORMAT_CONSOLE",
    "LOG_FORMAT_ENV",
    "LOG_FORMAT_JSON",
    "StructuredConsoleFormatter",
    "StructuredJSONFormatter",
    "get_logger",
    "safe_extras",
    "ErrorReporter",
    "LoggingErrorReporter",
    "default_reporter",
]
