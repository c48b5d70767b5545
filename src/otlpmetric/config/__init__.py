"""Exporter configuration: data model, options, environment and builders."""

from .builder import new_grpc_config, new_http_config
from .envconfig import EnvOptionsReader, apply_grpc_env_configs, apply_http_env_configs
from .models import (
    BackoffConfig,
    Config,
    ConnectParams,
    DialOption,
    DialOptionKind,
    SignalConfig,
)
from .options import (
    Option,
    new_generic_option,
    new_grpc_option,
    new_http_option,
    new_split_option,
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

__all__ = [
    "BackoffConfig",
    "Config",
    "ConnectParams",
    "DialOption",
    "DialOptionKind",
    "EnvOptionsReader",
    "Option",
    "SignalConfig",
    "apply_grpc_env_configs",
    "apply_http_env_configs",
    "new_generic_option",
    "new_grpc_config",
    "new_grpc_option",
    "new_http_config",
    "new_http_option",
    "new_split_option",
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
]
