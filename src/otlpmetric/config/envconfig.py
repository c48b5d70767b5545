"""Environment overlay for exporter configuration.

Environment variables are turned into ordinary options and applied before the
caller's options, so explicit options always win over the environment and the
environment always wins over built-in defaults. For every setting the generic
variable is read before its ``METRICS_`` variant, so the signal-specific one
wins when both are set.
"""

from __future__ import annotations

import dataclasses
import os
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import SplitResult, unquote

from otlpmetric.exceptions import InvalidEnvValueError
from otlpmetric.observability.reporting import ErrorReporter
from otlpmetric.security.mtls import TlsConfig
from otlpmetric.selectors import (
    delta_temporality_selector,
    default_temporality_selector,
    exponential_histogram_aggregation_selector,
    low_memory_temporality_selector,
)
from otlpmetric.utils.constant import DEFAULT_ENV_NAMESPACE, DEFAULT_METRICS_PATH, Compression, Transport
from otlpmetric.utils.path import has_scheme, join_path

from .models import Config
from .options import (
    Option,
    new_split_option,
    endpoint_host,
    parse_endpoint_url,
    with_aggregation_selector,
    with_compression,
    with_headers,
    with_insecure,
    with_reconnection_period,
    with_secure,
    with_temporality_selector,
    with_timeout,
    with_tls_client_config,
)

__all__ = [
    "EnvOptionsReader",
    "apply_grpc_env_configs",
    "apply_http_env_configs",
    "parse_headers",
]

_TEMPORALITY_PREFERENCES = {
    "cumulative": default_temporality_selector,
    "delta": delta_temporality_selector,
    "lowmemory": low_memory_temporality_selector,
}

_HISTOGRAM_AGGREGATIONS = {"explicit_bucket_histogram", "base2_exponential_bucket_histogram"}

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_PEM_CERTIFICATE_MARKER = "-----BEGIN CERTIFICATE-----"
_PEM_MARKER = "-----BEGIN "


def _read_file(path: str) -> bytes:
    return Path(path).expanduser().read_bytes()


def _unescape(value: str) -> str:
    if _BAD_ESCAPE.search(value):
        raise ValueError(f"invalid URL escape in {value!r}")
    return unquote(value)


def parse_headers(value: str, reporter: ErrorReporter, *, name: str = "HEADERS") -> dict[str, str]:
    """Parse ``key1=value1,key2=value2`` into a mapping.

    Keys and values are URL-decoded and whitespace-trimmed. Malformed entries
    are reported and skipped.
    """
    headers: dict[str, str] = {}
    for pair in value.split(","):
        key, sep, val = pair.partition("=")
        if not sep:
            reporter.report(
                InvalidEnvValueError(message="missing '='", data={"name": name, "value": pair}),
                "parse headers",
                input=pair,
            )
            continue
        try:
            header_name = _unescape(key).strip()
            header_value = _unescape(val).strip()
        except ValueError as exc:
            reporter.report(
                InvalidEnvValueError(message=str(exc), data={"name": name, "value": pair}, cause=exc),
                "escape header",
                input=pair,
            )
            continue
        if not header_name:
            reporter.report(
                InvalidEnvValueError(message="empty header name", data={"name": name, "value": pair}),
                "parse headers",
                input=pair,
            )
            continue
        headers[header_name] = header_value
    return headers


def _endpoint_scheme_option(parts: SplitResult) -> Option:
    if parts.scheme.lower() in {"http", "unix"}:
        return with_insecure()
    return with_secure()


def _endpoint_option(parts: SplitResult, *, signal_specific: bool) -> Option:
    if signal_specific:
        # A per-signal URL is used as-is; only an empty path becomes "/".
        url_path = parts.path or "/"
    else:
        # A generic URL is a base; metrics go to a path relative to it.
        url_path = join_path(parts.path, DEFAULT_METRICS_PATH)

    host = endpoint_host(parts)

    def http_fn(cfg: Config, _: ErrorReporter) -> Config:
        return dataclasses.replace(cfg, metrics=dataclasses.replace(cfg.metrics, endpoint=host, url_path=url_path))

    def grpc_fn(cfg: Config, _: ErrorReporter) -> Config:
        # For gRPC the whole host/path is the dial target.
        return dataclasses.replace(cfg, metrics=dataclasses.replace(cfg.metrics, endpoint=join_path(host, parts.path)))

    return new_split_option(http_fn, grpc_fn)


@dataclass(slots=True)
class EnvOptionsReader:
    """Reads exporter settings from environment variables.

    Args:
        getenv: Lookup function for variables; defaults to ``os.getenv``.
        read_file: Reads certificate files referenced by variables.
        namespace: Prefix of every variable name.
    """

    getenv: Callable[[str], str | None] = os.getenv
    read_file: Callable[[str], bytes] = _read_file
    namespace: str = DEFAULT_ENV_NAMESPACE

    def env_name(self, key: str) -> str:
        if not self.namespace:
            return key
        return f"{self.namespace}_{key}"

    def get(self, key: str) -> str | None:
        """Return the trimmed value of ``key``; unset and blank are both None."""
        value = self.getenv(self.env_name(key))
        if value is None:
            return None
        value = value.strip()
        return value or None

    def _report(self, reporter: ErrorReporter, key: str, value: str, message: str, cause: Exception | None = None) -> None:
        name = self.env_name(key)
        reporter.report(
            InvalidEnvValueError(message=message, data={"name": name, "value": value}, cause=cause),
            message,
            name=name,
            input=value,
        )

    def _url(self, key: str, reporter: ErrorReporter) -> SplitResult | None:
        value = self.get(key)
        if value is None:
            return None
        if not has_scheme(value):
            self._report(reporter, key, value, "parse url: missing scheme")
            return None
        try:
            return parse_endpoint_url(value)
        except ValueError as exc:
            self._report(reporter, key, value, "parse url", exc)
            return None

    def _bool(self, key: str) -> bool | None:
        value = self.get(key)
        if value is None:
            return None
        return value.lower() == "true"

    def _milliseconds(self, key: str, reporter: ErrorReporter) -> float | None:
        value = self.get(key)
        if value is None:
            return None
        try:
            millis = int(value)
        except ValueError as exc:
            self._report(reporter, key, value, "parse duration", exc)
            return None
        if millis < 0:
            self._report(reporter, key, value, "negative duration")
            return None
        return millis / 1000.0

    def _pem(self, key: str, reporter: ErrorReporter, marker: str) -> str | None:
        path = self.get(key)
        if path is None:
            return None
        try:
            content = self.read_file(path).decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._report(reporter, key, path, "read certificate file", exc)
            return None
        if marker not in content:
            self._report(reporter, key, path, "no PEM data found")
            return None
        return content

    def _tls_option(self, reporter: ErrorReporter) -> Option | None:
        ca_pem: str | None = None
        for key in ("CERTIFICATE", "METRICS_CERTIFICATE"):
            pem = self._pem(key, reporter, _PEM_CERTIFICATE_MARKER)
            if pem is not None:
                ca_pem = pem

        client_pair: tuple[str, str] | None = None
        for cert_key, key_key in (
            ("CLIENT_CERTIFICATE", "CLIENT_KEY"),
            ("METRICS_CLIENT_CERTIFICATE", "METRICS_CLIENT_KEY"),
        ):
            if self.get(cert_key) is None or self.get(key_key) is None:
                continue
            cert_pem = self._pem(cert_key, reporter, _PEM_CERTIFICATE_MARKER)
            key_pem = self._pem(key_key, reporter, _PEM_MARKER)
            if cert_pem is not None and key_pem is not None:
                client_pair = (cert_pem, key_pem)

        if ca_pem is None and client_pair is None:
            return None
        return with_tls_client_config(
            TlsConfig(
                ca_cert_pem=ca_pem,
                client_cert_pem=client_pair[0] if client_pair else None,
                client_key_pem=client_pair[1] if client_pair else None,
            )
        )

    def get_options(self, reporter: ErrorReporter) -> list[Option]:
        """Translate the environment into options, in application order."""
        opts: list[Option] = []

        for key, signal_specific in (("ENDPOINT", False), ("METRICS_ENDPOINT", True)):
            parts = self._url(key, reporter)
            if parts is not None:
                opts.append(_endpoint_scheme_option(parts))
                opts.append(_endpoint_option(parts, signal_specific=signal_specific))

        for key in ("INSECURE", "METRICS_INSECURE"):
            insecure = self._bool(key)
            if insecure is not None:
                opts.append(with_insecure() if insecure else with_secure())

        tls_option = self._tls_option(reporter)
        if tls_option is not None:
            opts.append(tls_option)

        for key in ("HEADERS", "METRICS_HEADERS"):
            value = self.get(key)
            if value is not None:
                opts.append(with_headers(parse_headers(value, reporter, name=self.env_name(key))))

        for key in ("COMPRESSION", "METRICS_COMPRESSION"):
            value = self.get(key)
            if value is not None:
                opts.append(with_compression(Compression.GZIP if value.lower() == "gzip" else Compression.NONE))

        for key in ("TIMEOUT", "METRICS_TIMEOUT"):
            timeout = self._milliseconds(key, reporter)
            if timeout is not None:
                opts.append(with_timeout(timeout))

        for key in ("RECONNECTION_PERIOD", "METRICS_RECONNECTION_PERIOD"):
            period = self._milliseconds(key, reporter)
            if period is not None:
                opts.append(with_reconnection_period(period))

        preference = self.get("METRICS_TEMPORALITY_PREFERENCE")
        if preference is not None:
            selector = _TEMPORALITY_PREFERENCES.get(preference.lower())
            if selector is None:
                self._report(reporter, "METRICS_TEMPORALITY_PREFERENCE", preference, "unknown temporality preference")
            else:
                opts.append(with_temporality_selector(selector))

        histogram = self.get("METRICS_DEFAULT_HISTOGRAM_AGGREGATION")
        if histogram is not None:
            normalized = histogram.lower()
            if normalized not in _HISTOGRAM_AGGREGATIONS:
                self._report(reporter, "METRICS_DEFAULT_HISTOGRAM_AGGREGATION", histogram, "unknown histogram aggregation")
            elif normalized == "base2_exponential_bucket_histogram":
                opts.append(with_aggregation_selector(exponential_histogram_aggregation_selector))

        return opts


def _apply_env_configs(
    cfg: Config,
    transport: Transport,
    reporter: ErrorReporter,
    reader: EnvOptionsReader | None,
) -> Config:
    for opt in (reader or EnvOptionsReader()).get_options(reporter):
        cfg = opt.apply(cfg, transport, reporter)
    return cfg


def apply_http_env_configs(cfg: Config, reporter: ErrorReporter, reader: EnvOptionsReader | None = None) -> Config:
    return _apply_env_configs(cfg, Transport.HTTP, reporter, reader)


def apply_grpc_env_configs(cfg: Config, reporter: ErrorReporter, reader: EnvOptionsReader | None = None) -> Config:
    return _apply_env_configs(cfg, Transport.GRPC, reporter, reader)
