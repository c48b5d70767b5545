"""Client-side helpers that consume a resolved exporter Config."""

from .transports import (
    create_grpc_channel,
    create_http_client,
    grpc_channel_arguments,
    grpc_transport_credentials,
    http_client_options,
    metrics_url,
)

__all__ = [
    "create_grpc_channel",
    "create_http_client",
    "grpc_channel_arguments",
    "grpc_transport_credentials",
    "http_client_options",
    "metrics_url",
]
