"""Hand a resolved Config to the HTTP and gRPC client libraries.

Nothing here sends data; these helpers only open clients/channels configured
exactly as the Config says.
"""

from __future__ import annotations

from typing import Any

import grpc
import httpx
from grpc.aio import Channel

from otlpmetric.config.models import Config
from otlpmetric.security.credentials import TransportCredentials
from otlpmetric.security.mtls import create_client_ssl_context
from otlpmetric.utils.constant import Compression


def grpc_channel_arguments(cfg: Config) -> list[tuple[str, Any]]:
    """Flatten the dial options into grpc channel arguments, in order."""
    arguments: list[tuple[str, Any]] = []
    for option in cfg.dial_options:
        arguments.extend(option.channel_arguments())
    return arguments


def grpc_transport_credentials(cfg: Config) -> TransportCredentials:
    """Return the credential the builder chose; the last credential dial option wins."""
    chosen = cfg.credential_dial_options()
    if chosen:
        return chosen[-1].value
    if cfg.metrics.grpc_credentials is not None:
        return cfg.metrics.grpc_credentials
    return TransportCredentials.insecure() if cfg.metrics.insecure else TransportCredentials.tls()


def create_grpc_channel(cfg: Config) -> Channel:
    """Open an asyncio gRPC channel to the configured endpoint.

    A channel supplied with ``with_grpc_conn`` is returned as-is.

    Raises:
        TlsMaterialError: if TLS material in the config cannot be loaded.
    """
    if cfg.grpc_conn is not None:
        return cfg.grpc_conn
    credentials = grpc_transport_credentials(cfg).to_grpc()
    return grpc.aio.secure_channel(
        cfg.metrics.endpoint,
        credentials,
        options=grpc_channel_arguments(cfg),
    )


def _base_url(cfg: Config) -> str:
    scheme = "http" if cfg.metrics.insecure else "https"
    return f"{scheme}://{cfg.metrics.endpoint}"


def metrics_url(cfg: Config) -> str:
    return f"{_base_url(cfg)}{cfg.metrics.url_path}"


def http_client_options(cfg: Config) -> dict[str, Any]:
    """Keyword arguments for ``httpx.AsyncClient`` matching ``cfg``.

    Raises:
        TlsMaterialError: if TLS material in the config cannot be loaded.
    """
    headers = dict(cfg.metrics.headers)
    if cfg.metrics.compression is Compression.GZIP:
        headers.setdefault("Content-Encoding", "gzip")
    verify: Any = True
    if not cfg.metrics.insecure and cfg.metrics.tls_config is not None:
        verify = create_client_ssl_context(cfg.metrics.tls_config)
    return {
        "base_url": _base_url(cfg),
        "headers": headers,
        "timeout": httpx.Timeout(cfg.metrics.timeout),
        "verify": verify,
    }


def create_http_client(cfg: Config) -> httpx.AsyncClient:
    """Return an ``httpx.AsyncClient``; the caller owns its lifecycle."""
    return httpx.AsyncClient(**http_client_options(cfg))


__all__ = [
    "create_grpc_channel",
    "create_http_client",
    "grpc_channel_arguments",
    "grpc_transport_credentials",
    "http_client_options",
    "metrics_url",
]
