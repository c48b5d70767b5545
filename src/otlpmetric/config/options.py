"""Options that adjust an exporter ``Config``.

An option is a deferred ``Config -> Config`` transform tagged with the
transports it applies to. Options run in the order the caller passes them, so
later options override earlier ones. An option never raises for bad input:
it reports the problem and returns the config unchanged.
"""

from __future__ import annotations

import dataclasses
import string
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import SplitResult, urlsplit

import grpc

from otlpmetric.exceptions import InvalidDialOptionError, InvalidEndpointError, InvalidTimeoutError
from otlpmetric.observability.reporting import ErrorReporter
from otlpmetric.retry import RetryConfig
from otlpmetric.security.credentials import TransportCredentials
from otlpmetric.security.mtls import TlsConfig
from otlpmetric.selectors import (
    AggregationSelector,
    TemporalitySelector,
    guard_aggregation_selector,
)
from otlpmetric.utils.constant import DEFAULT_METRICS_PATH, Compression, Transport
from otlpmetric.utils.path import has_scheme, join_path

from .models import Config, DialOption, DialOptionKind, freeze_headers

Mutation = Callable[[Config, ErrorReporter], Config]

_BUILDER_DIAL_OPTION_KINDS = frozenset(
    {
        DialOptionKind.SERVICE_CONFIG,
        DialOptionKind.TRANSPORT_CREDENTIALS,
        DialOptionKind.COMPRESSION,
        DialOptionKind.CONNECT_PARAMS,
    }
)

__all__ = [
    "Mutation",
    "Option",
    "new_generic_option",
    "new_split_option",
    "new_http_option",
    "new_grpc_option",
    "parse_endpoint_url",
    "endpoint_host",
    "with_endpoint",
    "with_compression",
    "with_url_path",
    "with_retry",
    "with_tls_client_config",
    "with_insecure",
    "with_secure",
    "with_headers",
    "with_timeout",
    "with_temporality_selector",
    "with_aggregation_selector",
    "with_credentials",
    "with_reconnection_period",
    "with_service_config",
    "with_dial_option",
    "with_grpc_conn",
]


@dataclass(frozen=True, slots=True)
class Option:
    """A configuration change for one or both transports.

    ``http`` and ``grpc`` hold the mutation applied when building that
    transport's config; a missing mutation makes the option inert for it.
    """

    http: Mutation | None = None
    grpc: Mutation | None = None

    @property
    def targets(self) -> frozenset[Transport]:
        targets = set()
        if self.http is not None:
            targets.add(Transport.HTTP)
        if self.grpc is not None:
            targets.add(Transport.GRPC)
        return frozenset(targets)

    def applies_to(self, transport: Transport) -> bool:
        return transport in self.targets

    def apply(self, cfg: Config, transport: Transport, reporter: ErrorReporter) -> Config:
        mutation = self.http if transport is Transport.HTTP else self.grpc
        if mutation is None:
            return cfg
        return mutation(cfg, reporter)


def new_generic_option(fn: Mutation) -> Option:
    """Option applying the same logic for HTTP and gRPC."""
    return Option(http=fn, grpc=fn)


def new_split_option(http_fn: Mutation, grpc_fn: Mutation) -> Option:
    """Option applying different logic for HTTP and gRPC."""
    return Option(http=http_fn, grpc=grpc_fn)


def new_http_option(fn: Mutation) -> Option:
    return Option(http=fn)


def new_grpc_option(fn: Mutation) -> Option:
    return Option(grpc=fn)


def _replace_metrics(cfg: Config, **changes: Any) -> Config:
    return dataclasses.replace(cfg, metrics=dataclasses.replace(cfg.metrics, **changes))


_NETLOC_FORBIDDEN = frozenset(string.whitespace) | frozenset("<>\"{}|\\^`")


def parse_endpoint_url(raw: str) -> SplitResult:
    """Split ``raw`` into URL parts, rejecting malformed host/port values.

    Raises:
        ValueError: if the URL cannot be used as an exporter endpoint.
    """
    parts = urlsplit(raw)
    if any(ch in _NETLOC_FORBIDDEN for ch in parts.netloc):
        raise ValueError(f"invalid character in host {parts.netloc!r}")
    # Accessing port validates it.
    parts.port
    return parts


def endpoint_host(parts: SplitResult) -> str:
    """Return ``host[:port]`` of ``parts``; any ``user:password@`` prefix is dropped."""
    return parts.netloc.rpartition("@")[2]


def _scheme_for(cfg: Config) -> str:
    if cfg.metrics.insecure:
        return "http"
    return "https"


# Generic options


def with_endpoint(endpoint: str) -> Option:
    """Set the collector endpoint.

    A scheme is added when missing (``http`` if the config is insecure at the
    time the option runs, ``https`` otherwise). Any path in the endpoint is
    used as a base: ``example.com/base`` sends to ``/base/v1/metrics``.
    """

    def apply(cfg: Config, reporter: ErrorReporter) -> Config:
        raw = endpoint
        if not has_scheme(raw):
            raw = f"{_scheme_for(cfg)}://{raw}"
        try:
            parts = parse_endpoint_url(raw)
        except ValueError as exc:
            reporter.report(
                InvalidEndpointError(message=f"parse url: {exc}", data={"input": raw}, cause=exc),
                "parse url",
                input=raw,
            )
            return cfg
        return _replace_metrics(
            cfg,
            endpoint=endpoint_host(parts),
            url_path=join_path(parts.path, DEFAULT_METRICS_PATH),
        )

    return new_generic_option(apply)


def with_compression(compression: Compression) -> Option:
    value = Compression(compression)
    return new_generic_option(lambda cfg, _: _replace_metrics(cfg, compression=value))


def with_url_path(url_path: str) -> Option:
    return new_generic_option(lambda cfg, _: _replace_metrics(cfg, url_path=url_path))


def with_retry(retry_config: RetryConfig) -> Option:
    return new_generic_option(lambda cfg, _: dataclasses.replace(cfg, retry_config=retry_config))


def with_tls_client_config(tls_config: TlsConfig) -> Option:
    """Use ``tls_config`` as the TLS material.

    HTTP keeps it for the client's SSL context; gRPC turns it into TLS
    transport credentials.
    """
    return new_split_option(
        lambda cfg, _: _replace_metrics(cfg, tls_config=tls_config),
        lambda cfg, _: _replace_metrics(cfg, grpc_credentials=TransportCredentials.tls(tls_config)),
    )


def with_insecure() -> Option:
    return new_generic_option(lambda cfg, _: _replace_metrics(cfg, insecure=True))


def with_secure() -> Option:
    return new_generic_option(lambda cfg, _: _replace_metrics(cfg, insecure=False))


def with_headers(headers: Mapping[str, str]) -> Option:
    """Replace the headers sent with every export."""
    frozen = freeze_headers(headers)
    return new_generic_option(lambda cfg, _: _replace_metrics(cfg, headers=frozen))


def with_timeout(timeout: float) -> Option:
    """Set the per-export timeout in seconds."""

    def apply(cfg: Config, reporter: ErrorReporter) -> Config:
        if timeout < 0:
            reporter.report(
                InvalidTimeoutError(message="negative timeout", data={"timeout": timeout}),
                "ignoring negative timeout",
                timeout=timeout,
            )
            return cfg
        return _replace_metrics(cfg, timeout=float(timeout))

    return new_generic_option(apply)


def with_temporality_selector(selector: TemporalitySelector) -> Option:
    return new_generic_option(lambda cfg, _: _replace_metrics(cfg, temporality_selector=selector))


def with_aggregation_selector(selector: AggregationSelector) -> Option:
    """Use ``selector`` to choose aggregations.

    Every aggregation it returns is copied and validated; invalid ones are
    replaced with the default aggregation and reported.
    """

    def apply(cfg: Config, reporter: ErrorReporter) -> Config:
        return _replace_metrics(cfg, aggregation_selector=guard_aggregation_selector(selector, reporter))

    return new_generic_option(apply)


# gRPC options


def with_credentials(credentials: TransportCredentials | grpc.ChannelCredentials) -> Option:
    """Use explicit transport credentials; they take precedence over ``with_insecure``."""
    if not isinstance(credentials, TransportCredentials):
        credentials = TransportCredentials.from_grpc(credentials)
    return new_grpc_option(lambda cfg, _: _replace_metrics(cfg, grpc_credentials=credentials))


def with_reconnection_period(period: float) -> Option:
    """Set the minimum time (seconds) between reconnection attempts."""

    def apply(cfg: Config, reporter: ErrorReporter) -> Config:
        if period < 0:
            reporter.report(
                InvalidTimeoutError(message="negative reconnection period", data={"period": period}),
                "ignoring negative reconnection period",
                period=period,
            )
            return cfg
        return dataclasses.replace(cfg, reconnection_period=float(period))

    return new_grpc_option(apply)


def with_service_config(service_config: str) -> Option:
    return new_grpc_option(lambda cfg, _: dataclasses.replace(cfg, service_config=service_config))


def with_dial_option(*options: DialOption | tuple[str, Any]) -> Option:
    """Append dial options; raw ``(name, value)`` tuples become channel arguments.

    Kinds the gRPC builder adds itself (credentials, service config,
    compression, connect params) are reported and dropped; use the dedicated
    options for those.
    """
    extra = tuple(
        opt if isinstance(opt, DialOption) else DialOption(DialOptionKind.CHANNEL_ARGUMENT, tuple(opt))
        for opt in options
    )

    def apply(cfg: Config, reporter: ErrorReporter) -> Config:
        accepted = []
        for opt in extra:
            if opt.kind in _BUILDER_DIAL_OPTION_KINDS:
                reporter.report(
                    InvalidDialOptionError(
                        message=f"{opt.kind.value} dial options are set by the builder",
                        data={"kind": opt.kind.value},
                    ),
                    "ignoring dial option",
                    kind=opt.kind.value,
                )
                continue
            accepted.append(opt)
        return dataclasses.replace(cfg, dial_options=cfg.dial_options + tuple(accepted))

    return new_grpc_option(apply)


def with_grpc_conn(channel: grpc.aio.Channel) -> Option:
    """Export over a caller-owned channel; the caller manages its lifecycle."""
    return new_grpc_option(lambda cfg, _: dataclasses.replace(cfg, grpc_conn=channel))
