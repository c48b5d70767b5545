"""Diagnostic channel for non-fatal configuration problems."""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

from otlpmetric.observability.logging import get_logger, safe_extras

__all__ = ["ErrorReporter", "LoggingErrorReporter", "default_reporter"]


@runtime_checkable
class ErrorReporter(Protocol):
    """Receives errors that were recovered from while building a config.

    Implementations must not raise and must be safe to call from several
    threads at once.
    """

    def report(self, error: BaseException, message: str, **key_values: Any) -> None:
        ...


class LoggingErrorReporter:
    """Reports errors through a structured logger at ERROR level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("otlpmetric")

    def report(self, error: BaseException, message: str, **key_values: Any) -> None:
        extra: dict[str, Any] = {"error": str(error)}
        code = getattr(error, "code", None)
        if code is not None:
            extra["error_code"] = code
        extra.update(key_values)
        self._logger.error(message, extra=safe_extras(extra))


_DEFAULT_REPORTER_LOCK = threading.Lock()
_DEFAULT_REPORTER: ErrorReporter | None = None


def default_reporter() -> ErrorReporter:
    """Return the shared logging reporter used when none is injected."""
    global _DEFAULT_REPORTER
    if _DEFAULT_REPORTER is None:
        with _DEFAULT_REPORTER_LOCK:
            if _DEFAULT_REPORTER is None:
                _DEFAULT_REPORTER = LoggingErrorReporter()
    return _DEFAULT_REPORTER
