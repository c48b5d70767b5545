"""Retry policy handed to the exporter's retry executor."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Configuration for retrying failed exports.

    Durations are in seconds. This package only stores the policy; the
    executor that consumes it lives with the transport.
    """

    enabled: bool = True
    initial_interval: float = 5.0
    max_interval: float = 30.0
    max_elapsed_time: float = 60.0


DEFAULT_RETRY_CONFIG = RetryConfig()
