"""Public API for otlpmetric.

Resolves the connection configuration of an OTLP metric exporter from
built-in defaults, ``OTEL_EXPORTER_OTLP_*`` environment variables and
caller options. Import from here when possible.
"""

from otlpmetric.config import (
    Config,
    DialOption,
    DialOptionKind,
    EnvOptionsReader,
    Option,
    SignalConfig,
    new_grpc_config,
    new_http_config,
    with_aggregation_selector,
    with_compression,
    with_credentials,
    with_dial_option,
    with_endpoint,
    with_grpc_conn,
    with_headers,
    with_insecure,
    with_reconnection_period,
    with_retry,
    with_secure,
    with_service_config,
    with_temporality_selector,
    with_timeout,
    with_tls_client_config,
    with_url_path,
)
from otlpmetric.exceptions import (
    InvalidAggregationError,
    InvalidDialOptionError,
    InvalidEndpointError,
    InvalidEnvValueError,
    InvalidTimeoutError,
    OtlpConfigError,
    TlsMaterialError,
)
from otlpmetric.observability import ErrorReporter, LoggingErrorReporter
from otlpmetric.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from otlpmetric.security import CredentialKind, TlsConfig, TransportCredentials
from otlpmetric.utils.constant import Compression, Transport
from otlpmetric.utils.path import clean_path, has_scheme

__all__ = [
    # builders
    "new_grpc_config",
    "new_http_config",
    # model
    "Config",
    "SignalConfig",
    "DialOption",
    "DialOptionKind",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "Compression",
    "Transport",
    # options
    "Option",
    "EnvOptionsReader",
    "with_aggregation_selector",
    "with_compression",
    "with_credentials",
    "with_dial_option",
    "with_endpoint",
    "with_grpc_conn",
    "with_headers",
    "with_insecure",
    "with_reconnection_period",
    "with_retry",
    "with_secure",
    "with_service_config",
    "with_temporality_selector",
    "with_timeout",
    "with_tls_client_config",
    "with_url_path",
    # security
    "CredentialKind",
    "TlsConfig",
    "TransportCredentials",
    # errors
    "ErrorReporter",
    "LoggingErrorReporter",
    "OtlpConfigError",
    "InvalidAggregationError",
    "InvalidDialOptionError",
    "InvalidEndpointError",
    "InvalidEnvValueError",
    "InvalidTimeoutError",
    "TlsMaterialError",
    # paths
    "clean_path",
    "has_scheme",
]
