from __future__ import annotations

import enum
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from otlpmetric.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from otlpmetric.security.credentials import TransportCredentials
from otlpmetric.security.mtls import TlsConfig
from otlpmetric.selectors import (
    AggregationSelector,
    TemporalitySelector,
    default_aggregation_selector,
    default_temporality_selector,
)
from otlpmetric.utils.constant import DEFAULT_METRICS_PATH, DEFAULT_TIMEOUT, Compression

_EMPTY_HEADERS: Mapping[str, str] = MappingProxyType({})


def freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    """Return a read-only copy of ``headers``."""
    if not headers:
        return _EMPTY_HEADERS
    return MappingProxyType(dict(headers))


class DialOptionKind(str, enum.Enum):
    """What a dial option configures on the gRPC channel."""

    USER_AGENT = "user_agent"
    SERVICE_CONFIG = "service_config"
    TRANSPORT_CREDENTIALS = "transport_credentials"
    COMPRESSION = "compression"
    CONNECT_PARAMS = "connect_params"
    CHANNEL_ARGUMENT = "channel_argument"


@dataclass(frozen=True, slots=True)
class BackoffConfig:
    """Reconnect backoff shape; durations in seconds."""

    base_delay: float = 1.0
    multiplier: float = 1.6
    jitter: float = 0.2
    max_delay: float = 120.0


DEFAULT_BACKOFF_CONFIG = BackoffConfig()


@dataclass(frozen=True, slots=True)
class ConnectParams:
    min_connect_timeout: float
    backoff: BackoffConfig = DEFAULT_BACKOFF_CONFIG


@dataclass(frozen=True, slots=True)
class DialOption:
    """One transport-construction parameter for the gRPC channel.

    Dial options are applied in order; a later option of the same kind wins.
    """

    kind: DialOptionKind
    value: Any

    def channel_arguments(self) -> list[tuple[str, Any]]:
        """Render as grpc channel arguments.

        Credentials are not a channel argument and render as an empty list.
        """
        if self.kind is DialOptionKind.USER_AGENT:
            return [("grpc.primary_user_agent", self.value)]
        if self.kind is DialOptionKind.SERVICE_CONFIG:
            return [("grpc.service_config", self.value)]
        if self.kind is DialOptionKind.COMPRESSION:
            return [("grpc.default_compression_algorithm", int(self.value))]
        if self.kind is DialOptionKind.CONNECT_PARAMS:
            params: ConnectParams = self.value
            return [
                ("grpc.min_reconnect_backoff_ms", math.ceil(params.min_connect_timeout * 1000)),
                ("grpc.initial_reconnect_backoff_ms", int(params.backoff.base_delay * 1000)),
                ("grpc.max_reconnect_backoff_ms", int(params.backoff.max_delay * 1000)),
            ]
        if self.kind is DialOptionKind.CHANNEL_ARGUMENT:
            return [tuple(self.value)]
        return []


@dataclass(frozen=True, slots=True)
class SignalConfig:
    """Per-signal transport parameters."""

    endpoint: str = ""
    insecure: bool = False
    tls_config: TlsConfig | None = None
    headers: Mapping[str, str] = field(default_factory=lambda: _EMPTY_HEADERS)
    compression: Compression = Compression.NONE
    timeout: float = DEFAULT_TIMEOUT
    url_path: str = DEFAULT_METRICS_PATH

    # gRPC only
    grpc_credentials: TransportCredentials | None = None

    temporality_selector: TemporalitySelector = default_temporality_selector
    aggregation_selector: AggregationSelector = default_aggregation_selector


@dataclass(frozen=True, slots=True)
class Config:
    """Resolved exporter configuration.

    Built once by ``new_http_config`` / ``new_grpc_config`` and never mutated
    afterwards; every resolution step produces a new value.
    """

    metrics: SignalConfig = field(default_factory=SignalConfig)
    retry_config: RetryConfig = DEFAULT_RETRY_CONFIG

    # gRPC only
    reconnection_period: float = 0.0
    service_config: str = ""
    dial_options: tuple[DialOption, ...] = ()
    grpc_conn: Any | None = None

    def credential_dial_options(self) -> list[DialOption]:
        return [opt for opt in self.dial_options if opt.kind is DialOptionKind.TRANSPORT_CREDENTIALS]
