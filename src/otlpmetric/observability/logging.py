from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Mapping

__all__ = [
    "LOG_FORMAT_CONSOLE",
    "LOG_FORMAT_ENV",
    "LOG_FORMAT_JSON",
    "StructuredConsoleFormatter",
    "StructuredJSONFormatter",
    "get_logger",
    "safe_extras",
]


LOG_FORMAT_ENV = "OTLPMETRIC_LOG_FORMAT"
LOG_FORMAT_JSON = "json"
LOG_FORMAT_CONSOLE = "console"

_DEFAULT_CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_RESERVED_FIELDS = {"timestamp", "level", "logger", "message", "exception", "stack"}

_LOG_RECORD_ATTRS = {"name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs", "relativeCreated", "thread", "threadName", "processName", "process", "message", "asctime", "taskName"}


def _normalize_log_format(value: str | None) -> str:
    if not value:
        return LOG_FORMAT_JSON
    normalized = value.strip().lower()
    if normalized in {LOG_FORMAT_JSON, LOG_FORMAT_CONSOLE}:
        return normalized
    return LOG_FORMAT_JSON


def _json_default(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return repr(value)


def _extract_extras(record: logging.LogRecord) -> dict[str, Any]:
    extras: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _LOG_RECORD_ATTRS or key.startswith("_"):
            continue
        extras[key] = value
    return extras


def _filter_reserved(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if key not in _RESERVED_FIELDS}


def safe_extras(values: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``values`` usable as ``extra=``; colliding keys get an ``attr_`` prefix."""
    extras: dict[str, Any] = {}
    for key, value in values.items():
        if key in _LOG_RECORD_ATTRS or key in _RESERVED_FIELDS or key.startswith("_"):
            key = f"attr_{key.lstrip('_')}"
        extras[key] = value
    return extras


def _handler_exists(logger: logging.Logger, format_kind: str) -> bool:
    for handler in logger.handlers:
        if getattr(handler, "_otlpmetric_handler", False) and getattr(
            handler, "_format_kind", None
        ) == format_kind:
            return True
    return False


def _ensure_handler(
    logger: logging.Logger,
    formatter: logging.Formatter,
    *,
    format_kind: str,
    level: int | None,
    stream: Any,
) -> None:
    if _handler_exists(logger, format_kind):
        return
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(level or logging.NOTSET)
    handler._otlpmetric_handler = True
    handler._format_kind = format_kind
    logger.addHandler(handler)
    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    logger.propagate = False


class StructuredJSONFormatter(logging.Formatter):
    """Formats log records as JSON strings.

    Args:
        datefmt: Optional date format string.
        json_default: Callable used by json.dumps for unknown types.
        ensure_ascii: Whether to escape non-ASCII characters.
    """

    def __init__(
        self,
        *,
        datefmt: str | None = None,
        json_default: Any | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__(datefmt=datefmt)
        self._json_default = json_default or _json_default
        self._ensure_ascii = ensure_ascii

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_filter_reserved(_extract_extras(record)))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(
            payload,
            default=self._json_default,
            ensure_ascii=self._ensure_ascii,
        )


class StructuredConsoleFormatter(logging.Formatter):
    """Plain console formatter; appends structured extras as ``key=value``."""

    def __init__(
        self,
        fmt: str | None = None,
        *,
        datefmt: str | None = None,
    ) -> None:
        super().__init__(fmt=fmt or _DEFAULT_CONSOLE_FORMAT, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _filter_reserved(_extract_extras(record))
        if not extras:
            return line
        rendered = " ".join(f"{key}={value}" for key, value in extras.items())
        return f"{line} {rendered}"


def get_logger(
    name: str,
    *,
    log_format: str | None = None,
    json_formatter: logging.Formatter | None = None,
    console_formatter: logging.Formatter | None = None,
    level: int | None = None,
    stream: Any | None = None,
) -> logging.Logger:
    """Return a configured logger based on environment configuration.

    Args:
        name: Logger name.
        log_format: Optional override for log format selection.
        json_formatter: Optional JSON formatter override.
        console_formatter: Optional console formatter override.
        level: Optional log level to apply to handler and logger.
        stream: Optional stream for handler output.

    Returns:
        Configured logging.Logger instance.
    """

    resolved_format = _normalize_log_format(
        log_format or os.getenv(LOG_FORMAT_ENV)
    )
    formatter: logging.Formatter
    if resolved_format == LOG_FORMAT_CONSOLE:
        formatter = console_formatter or StructuredConsoleFormatter()
    else:
        formatter = json_formatter or StructuredJSONFormatter()
    logger = logging.getLogger(name)
    _ensure_handler(
        logger,
        formatter,
        format_kind=resolved_format,
        level=level,
        stream=stream,
    )
    return logger
