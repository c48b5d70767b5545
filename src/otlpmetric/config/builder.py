"""Builds exporter configs: defaults, then environment, then options."""

from __future__ import annotations

import dataclasses
import logging

import grpc

from otlpmetric.observability.reporting import ErrorReporter, default_reporter
from otlpmetric.retry import DEFAULT_RETRY_CONFIG
from otlpmetric.security.credentials import TransportCredentials
from otlpmetric.selectors import default_aggregation_selector, default_temporality_selector
from otlpmetric.utils.constant import (
    DEFAULT_COLLECTOR_GRPC_PORT,
    DEFAULT_COLLECTOR_HOST,
    DEFAULT_COLLECTOR_HTTP_PORT,
    DEFAULT_METRICS_PATH,
    DEFAULT_TIMEOUT,
    Compression,
    Transport,
)
from otlpmetric.utils.path import clean_path
from otlpmetric.version import get_user_agent

from .envconfig import EnvOptionsReader, apply_grpc_env_configs, apply_http_env_configs
from .models import Config, ConnectParams, DialOption, DialOptionKind, SignalConfig
from .options import Option

logger = logging.getLogger(__name__)


def _default_config(port: int) -> Config:
    return Config(
        metrics=SignalConfig(
            endpoint=f"{DEFAULT_COLLECTOR_HOST}:{port}",
            url_path=DEFAULT_METRICS_PATH,
            compression=Compression.NONE,
            timeout=DEFAULT_TIMEOUT,
            temporality_selector=default_temporality_selector,
            aggregation_selector=default_aggregation_selector,
        ),
        retry_config=DEFAULT_RETRY_CONFIG,
    )


def new_http_config(
    *options: Option,
    reporter: ErrorReporter | None = None,
    env_reader: EnvOptionsReader | None = None,
) -> Config:
    """Return a Config for the HTTP transport.

    Settings come from, in increasing precedence: built-in defaults, the
    environment (read through ``env_reader``), then ``options`` in order.
    Problems with any input are sent to ``reporter``; this never raises.
    """
    if reporter is None:
        reporter = default_reporter()
    cfg = _default_config(DEFAULT_COLLECTOR_HTTP_PORT)
    cfg = apply_http_env_configs(cfg, reporter, env_reader)
    for opt in options:
        cfg = opt.apply(cfg, Transport.HTTP, reporter)
    cfg = dataclasses.replace(
        cfg,
        metrics=dataclasses.replace(cfg.metrics, url_path=clean_path(cfg.metrics.url_path, DEFAULT_METRICS_PATH)),
    )
    logger.debug(
        "resolved http exporter config",
        extra={"endpoint": cfg.metrics.endpoint, "url_path": cfg.metrics.url_path, "insecure": cfg.metrics.insecure},
    )
    return cfg


def _resolve_credentials(cfg: Config) -> tuple[Config, TransportCredentials]:
    # Explicit credentials win over the insecure flag.
    if cfg.metrics.grpc_credentials is not None:
        return cfg, cfg.metrics.grpc_credentials
    if cfg.metrics.insecure:
        return cfg, TransportCredentials.insecure()
    # Default to the host's root CAs, and record the choice on the config.
    creds = TransportCredentials.tls()
    cfg = dataclasses.replace(cfg, metrics=dataclasses.replace(cfg.metrics, grpc_credentials=creds))
    return cfg, creds


def new_grpc_config(
    *options: Option,
    reporter: ErrorReporter | None = None,
    env_reader: EnvOptionsReader | None = None,
) -> Config:
    """Return a Config for the gRPC transport.

    Resolution order is the same as ``new_http_config``. Afterwards the dial
    options are completed in this order: service config, exactly one
    transport credential, gzip compression, reconnection parameters.
    """
    if reporter is None:
        reporter = default_reporter()
    cfg = dataclasses.replace(
        _default_config(DEFAULT_COLLECTOR_GRPC_PORT),
        dial_options=(DialOption(DialOptionKind.USER_AGENT, get_user_agent()),),
    )
    cfg = apply_grpc_env_configs(cfg, reporter, env_reader)
    for opt in options:
        cfg = opt.apply(cfg, Transport.GRPC, reporter)

    dial_options = list(cfg.dial_options)
    if cfg.service_config:
        dial_options.append(DialOption(DialOptionKind.SERVICE_CONFIG, cfg.service_config))
    cfg, creds = _resolve_credentials(cfg)
    dial_options.append(DialOption(DialOptionKind.TRANSPORT_CREDENTIALS, creds))
    if cfg.metrics.compression is Compression.GZIP:
        dial_options.append(DialOption(DialOptionKind.COMPRESSION, grpc.Compression.Gzip))
    if cfg.reconnection_period != 0:
        dial_options.append(
            DialOption(DialOptionKind.CONNECT_PARAMS, ConnectParams(min_connect_timeout=cfg.reconnection_period))
        )
    cfg = dataclasses.replace(cfg, dial_options=tuple(dial_options))

    logger.debug(
        "resolved grpc exporter config",
        extra={
            "endpoint": cfg.metrics.endpoint,
            "credentials": creds.kind.value,
            "dial_options": len(cfg.dial_options),
        },
    )
    return cfg
