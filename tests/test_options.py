from __future__ import annotations

import dataclasses

import grpc
import pytest

from otlpmetric.config import (
    Config,
    DialOption,
    DialOptionKind,
    Option,
    SignalConfig,
    new_generic_option,
    new_grpc_option,
    new_http_option,
    new_split_option,
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
    with_timeout,
    with_tls_client_config,
    with_url_path,
)
from otlpmetric.exceptions import InvalidDialOptionError, InvalidEndpointError, InvalidTimeoutError
from otlpmetric.retry import RetryConfig
from otlpmetric.security import CredentialKind, TlsConfig, TransportCredentials
from otlpmetric.utils.constant import Compression, Transport


def _set_endpoint(value: str):
    def fn(cfg, _):
        return dataclasses.replace(cfg, metrics=dataclasses.replace(cfg.metrics, endpoint=value))

    return fn


def test_generic_option_applies_to_both_transports(reporter):
    opt = new_generic_option(_set_endpoint("both:1"))

    assert opt.targets == {Transport.HTTP, Transport.GRPC}
    assert opt.apply(Config(), Transport.HTTP, reporter).metrics.endpoint == "both:1"
    assert opt.apply(Config(), Transport.GRPC, reporter).metrics.endpoint == "both:1"


def test_split_option_picks_mutation_per_transport(reporter):
    opt = new_split_option(_set_endpoint("http:1"), _set_endpoint("grpc:1"))

    assert opt.apply(Config(), Transport.HTTP, reporter).metrics.endpoint == "http:1"
    assert opt.apply(Config(), Transport.GRPC, reporter).metrics.endpoint == "grpc:1"


def test_transport_only_options_are_inert_for_the_other_transport(reporter):
    cfg = Config()
    http_only = new_http_option(_set_endpoint("http:1"))
    grpc_only = new_grpc_option(_set_endpoint("grpc:1"))

    assert http_only.targets == {Transport.HTTP}
    assert http_only.apply(cfg, Transport.GRPC, reporter) is cfg
    assert grpc_only.applies_to(Transport.GRPC)
    assert not grpc_only.applies_to(Transport.HTTP)
    assert grpc_only.apply(cfg, Transport.HTTP, reporter) is cfg


def test_option_does_not_mutate_input_config(reporter):
    cfg = Config()
    updated = with_insecure().apply(cfg, Transport.HTTP, reporter)

    assert cfg.metrics.insecure is False
    assert updated.metrics.insecure is True


def test_with_endpoint_uses_path_as_base(reporter):
    cfg = with_endpoint("example.com/base").apply(Config(), Transport.HTTP, reporter)

    assert cfg.metrics.endpoint == "example.com"
    assert cfg.metrics.url_path == "/base/v1/metrics"
    assert reporter.reports == []


def test_with_endpoint_discards_scheme(reporter):
    cfg = with_endpoint("https://collector:4318").apply(Config(), Transport.GRPC, reporter)

    assert cfg.metrics.endpoint == "collector:4318"
    assert cfg.metrics.url_path == "/v1/metrics"


def test_with_endpoint_invalid_url_keeps_config_and_reports(reporter):
    cfg = Config()
    result = with_endpoint("[::1").apply(cfg, Transport.HTTP, reporter)

    assert result is cfg
    assert len(reporter.reports) == 1
    error, message, key_values = reporter.reports[0]
    assert isinstance(error, InvalidEndpointError)
    assert message == "parse url"
    assert key_values["input"] == "https://[::1"


def test_with_endpoint_scheme_follows_insecure_flag(reporter):
    insecure = Config(metrics=SignalConfig(insecure=True))
    with_endpoint("[::1").apply(insecure, Transport.HTTP, reporter)

    assert reporter.reports[0][2]["input"] == "http://[::1"


def test_with_endpoint_rejects_bad_port(reporter):
    cfg = Config()
    assert with_endpoint("collector:notaport").apply(cfg, Transport.HTTP, reporter) is cfg
    assert isinstance(reporter.errors[0], InvalidEndpointError)


def test_with_headers_replaces_mapping(reporter):
    source = {"a": "1"}
    cfg = with_headers(source).apply(Config(), Transport.HTTP, reporter)
    cfg = with_headers({"b": "2"}).apply(cfg, Transport.HTTP, reporter)

    assert dict(cfg.metrics.headers) == {"b": "2"}


def test_with_headers_is_isolated_from_caller_mapping(reporter):
    source = {"a": "1"}
    cfg = with_headers(source).apply(Config(), Transport.HTTP, reporter)
    source["b"] = "2"

    assert dict(cfg.metrics.headers) == {"a": "1"}
    with pytest.raises(TypeError):
        cfg.metrics.headers["c"] = "3"  # type: ignore[index]


def test_with_timeout_rejects_negative(reporter):
    cfg = with_timeout(2.5).apply(Config(), Transport.HTTP, reporter)
    assert cfg.metrics.timeout == 2.5

    result = with_timeout(-1).apply(cfg, Transport.HTTP, reporter)
    assert result is cfg
    assert isinstance(reporter.errors[0], InvalidTimeoutError)


def test_repeated_option_is_idempotent(reporter):
    options = [
        with_compression(Compression.GZIP),
        with_headers({"k": "v"}),
        with_url_path("/custom"),
        with_timeout(3),
        with_insecure(),
    ]
    once = Config()
    twice = Config()
    for opt in options:
        once = opt.apply(once, Transport.GRPC, reporter)
        twice = opt.apply(opt.apply(twice, Transport.GRPC, reporter), Transport.GRPC, reporter)

    assert once == twice


def test_with_compression_accepts_string():
    assert with_compression("gzip").apply(Config(), Transport.HTTP, None).metrics.compression is Compression.GZIP
    with pytest.raises(ValueError):
        with_compression("brotli")


def test_insecure_and_secure_toggle(reporter):
    cfg = with_insecure().apply(Config(), Transport.HTTP, reporter)
    cfg = with_secure().apply(cfg, Transport.HTTP, reporter)

    assert cfg.metrics.insecure is False


def test_with_retry(reporter):
    retry = RetryConfig(enabled=False)
    cfg = with_retry(retry).apply(Config(), Transport.HTTP, reporter)

    assert cfg.retry_config is retry


def test_with_tls_client_config_is_split(reporter):
    tls = TlsConfig(ca_cert_pem="-----BEGIN CERTIFICATE-----\n")
    opt = with_tls_client_config(tls)

    http_cfg = opt.apply(Config(), Transport.HTTP, reporter)
    grpc_cfg = opt.apply(Config(), Transport.GRPC, reporter)

    assert http_cfg.metrics.tls_config == tls
    assert http_cfg.metrics.grpc_credentials is None
    assert grpc_cfg.metrics.tls_config is None
    assert grpc_cfg.metrics.grpc_credentials == TransportCredentials.tls(tls)


def test_with_credentials_wraps_grpc_channel_credentials(reporter):
    channel_creds = grpc.ssl_channel_credentials()
    cfg = with_credentials(channel_creds).apply(Config(), Transport.GRPC, reporter)

    assert cfg.metrics.grpc_credentials.kind is CredentialKind.CUSTOM
    assert cfg.metrics.grpc_credentials.to_grpc() is channel_creds


def test_grpc_only_options(reporter):
    channel = object()
    cfg = Config()
    for opt in (
        with_reconnection_period(5),
        with_service_config('{"loadBalancingConfig": [{"round_robin": {}}]}'),
        with_dial_option(("grpc.keepalive_time_ms", 1000)),
        with_grpc_conn(channel),
        with_credentials(TransportCredentials.insecure()),
    ):
        assert opt.targets == {Transport.GRPC}
        cfg = opt.apply(cfg, Transport.GRPC, reporter)

    assert cfg.reconnection_period == 5.0
    assert cfg.service_config.startswith('{"loadBalancingConfig"')
    assert cfg.dial_options == (DialOption(DialOptionKind.CHANNEL_ARGUMENT, ("grpc.keepalive_time_ms", 1000)),)
    assert cfg.grpc_conn is channel


def test_with_reconnection_period_rejects_negative(reporter):
    cfg = Config()
    assert with_reconnection_period(-1).apply(cfg, Transport.GRPC, reporter) is cfg
    assert isinstance(reporter.errors[0], InvalidTimeoutError)


def test_option_is_frozen():
    opt = with_insecure()
    assert isinstance(opt, Option)
    with pytest.raises(dataclasses.FrozenInstanceError):
        opt.http = None  # type: ignore[misc]


@pytest.mark.parametrize(
    "endpoint, expected",
    [
        ("user:pw@collector:4318", "collector:4318"),
        ("https://user@collector:4318/base", "collector:4318"),
        ("[::1]:4317", "[::1]:4317"),
        ("u:p@[::1]:4317", "[::1]:4317"),
    ],
)
def test_with_endpoint_drops_userinfo(reporter, endpoint, expected):
    cfg = with_endpoint(endpoint).apply(Config(), Transport.GRPC, reporter)

    assert cfg.metrics.endpoint == expected
    assert reporter.reports == []


@pytest.mark.parametrize(
    "kind",
    [
        DialOptionKind.TRANSPORT_CREDENTIALS,
        DialOptionKind.SERVICE_CONFIG,
        DialOptionKind.COMPRESSION,
        DialOptionKind.CONNECT_PARAMS,
    ],
)
def test_with_dial_option_drops_builder_managed_kinds(reporter, kind):
    keep = DialOption(DialOptionKind.CHANNEL_ARGUMENT, ("grpc.keepalive_time_ms", 1000))
    cfg = with_dial_option(DialOption(kind, object()), keep).apply(Config(), Transport.GRPC, reporter)

    assert cfg.dial_options == (keep,)
    assert len(reporter.reports) == 1
    error, _, key_values = reporter.reports[0]
    assert isinstance(error, InvalidDialOptionError)
    assert key_values["kind"] == kind.value
