"""TLS material for exporter connections.

This module provides:
- TlsConfig, the TLS material an exporter config carries
- Client SSL context creation for the HTTP transport
- PEM loading for building gRPC channel credentials
"""

from __future__ import annotations

import enum
import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path

from otlpmetric.exceptions import TlsMaterialError


class TlsVersion(str, enum.Enum):
    """Supported TLS protocol versions."""

    TLSv1_2 = "TLSv1.2"
    TLSv1_3 = "TLSv1.3"


_TLS_VERSION_MAP: dict[TlsVersion, ssl.TLSVersion] = {
    TlsVersion.TLSv1_2: ssl.TLSVersion.TLSv1_2,
    TlsVersion.TLSv1_3: ssl.TLSVersion.TLSv1_3,
}


@dataclass(frozen=True, slots=True)
class TlsConfig:
    """TLS configuration for exporter connections.

    A config with no CA material trusts the system root CAs.

    Args:
        ca_cert_path: Optional custom CA bundle to trust.
        client_cert_path: Optional client certificate path for mTLS.
        client_key_path: Optional client private key path for mTLS.
        client_key_password: Optional password for encrypted private keys (HTTP only).
        minimum_version: Minimum TLS version to allow (HTTP only).
        check_hostname: Whether to check hostnames during verification (HTTP only).
        verify_mode: SSL verification mode to apply to the context (HTTP only).
        ca_cert_pem: Optional PEM content for CA certificate. Takes precedence over ca_cert_path.
        client_cert_pem: Optional PEM content for client certificate. Takes precedence over client_cert_path.
        client_key_pem: Optional PEM content for client private key. Takes precedence over client_key_path.
    """

    ca_cert_path: Path | None = None
    client_cert_path: Path | None = None
    client_key_path: Path | None = None
    client_key_password: str | None = None
    minimum_version: TlsVersion = TlsVersion.TLSv1_2
    check_hostname: bool = True
    verify_mode: ssl.VerifyMode = ssl.CERT_REQUIRED
    ca_cert_pem: str | None = None
    client_cert_pem: str | None = None
    client_key_pem: str | None = None

    @property
    def has_ca(self) -> bool:
        return self.ca_cert_pem is not None or self.ca_cert_path is not None


def _read_pem(pem: str | None, path: Path | None, what: str) -> bytes | None:
    if pem is not None:
        return pem.encode("utf-8")
    if path is None:
        return None
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as exc:
        raise TlsMaterialError(
            message=f"failed to read {what}",
            data={"path": str(path)},
            cause=exc,
        ) from exc


def load_pem_material(config: TlsConfig) -> tuple[bytes | None, bytes | None, bytes | None]:
    """Return ``(root_certificates, private_key, certificate_chain)`` as PEM bytes.

    The tuple lines up with ``grpc.ssl_channel_credentials`` arguments; missing
    pieces are None.
    """
    root = _read_pem(config.ca_cert_pem, config.ca_cert_path, "CA certificate")
    key = _read_pem(config.client_key_pem, config.client_key_path, "client key")
    chain = _read_pem(config.client_cert_pem, config.client_cert_path, "client certificate")
    if (key is None) != (chain is None):
        raise TlsMaterialError(message="client certificate and client key must be set together")
    return root, key, chain


def _write_temp_pem(content: str) -> Path:
    # SSLContext only loads certificate chains from files.
    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        delete=False,
        suffix=".pem",
    )
    try:
        tmp.write(content)
        tmp.flush()
    finally:
        tmp.close()
    return Path(tmp.name)


def _unlink_quietly(path: Path | None) -> None:
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError:  # pragma: no cover - best effort
        pass


def create_client_ssl_context(config: TlsConfig) -> ssl.SSLContext:
    """Create a client SSLContext based on the provided configuration."""

    cafile = str(config.ca_cert_path) if config.ca_cert_path else None
    cadata = config.ca_cert_pem
    try:
        if cadata is not None:
            context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cadata=cadata)
        else:
            context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cafile=cafile)
    except (OSError, ssl.SSLError) as exc:
        raise TlsMaterialError(message="failed to load CA certificate", cause=exc) from exc

    context.check_hostname = config.check_hostname
    context.verify_mode = config.verify_mode
    context.minimum_version = _TLS_VERSION_MAP[config.minimum_version]

    cert_tmp: Path | None = None
    key_tmp: Path | None = None
    try:
        # PEM takes precedence over path if both are provided.
        if config.client_cert_pem is not None or config.client_key_pem is not None:
            if not config.client_cert_pem or not config.client_key_pem:
                raise TlsMaterialError(message="Both client_cert_pem and client_key_pem are required")
            cert_tmp = _write_temp_pem(config.client_cert_pem)
            key_tmp = _write_temp_pem(config.client_key_pem)
            certfile, keyfile = str(cert_tmp), str(key_tmp)
        elif config.client_cert_path or config.client_key_path:
            if not config.client_cert_path or not config.client_key_path:
                raise TlsMaterialError(message="Both client_cert_path and client_key_path are required")
            certfile, keyfile = str(config.client_cert_path), str(config.client_key_path)
        else:
            return context
        context.load_cert_chain(certfile=certfile, keyfile=keyfile, password=config.client_key_password)
    except (OSError, ssl.SSLError) as exc:
        raise TlsMaterialError(message="failed to load client certificate", cause=exc) from exc
    finally:
        _unlink_quietly(cert_tmp)
        _unlink_quietly(key_tmp)
    return context
