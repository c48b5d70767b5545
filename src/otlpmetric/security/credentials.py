from __future__ import annotations

import enum
from dataclasses import dataclass

import grpc
import grpc.experimental

from .mtls import TlsConfig, load_pem_material


class CredentialKind(str, enum.Enum):
    """How a gRPC connection is secured."""

    INSECURE = "insecure"
    TLS = "tls"
    CUSTOM = "custom"


@dataclass(frozen=True, slots=True)
class TransportCredentials:
    """Transport security chosen for a gRPC exporter connection.

    ``TLS`` without a ``tls_config`` trusts the system root CAs. ``CUSTOM``
    wraps channel credentials the caller built with grpc directly.
    """

    kind: CredentialKind
    tls_config: TlsConfig | None = None
    channel_credentials: grpc.ChannelCredentials | None = None

    @classmethod
    def insecure(cls) -> TransportCredentials:
        return cls(kind=CredentialKind.INSECURE)

    @classmethod
    def tls(cls, tls_config: TlsConfig | None = None) -> TransportCredentials:
        return cls(kind=CredentialKind.TLS, tls_config=tls_config)

    @classmethod
    def from_grpc(cls, channel_credentials: grpc.ChannelCredentials) -> TransportCredentials:
        return cls(kind=CredentialKind.CUSTOM, channel_credentials=channel_credentials)

    @property
    def uses_system_roots(self) -> bool:
        return self.kind is CredentialKind.TLS and (self.tls_config is None or not self.tls_config.has_ca)

    def to_grpc(self) -> grpc.ChannelCredentials:
        """Build the grpc channel credentials.

        Raises:
            TlsMaterialError: if TLS material cannot be read.
        """
        if self.kind is CredentialKind.CUSTOM:
            assert self.channel_credentials is not None
            return self.channel_credentials
        if self.kind is CredentialKind.INSECURE:
            return grpc.experimental.insecure_channel_credentials()
        if self.tls_config is None:
            return grpc.ssl_channel_credentials()
        root, key, chain = load_pem_material(self.tls_config)
        return grpc.ssl_channel_credentials(
            root_certificates=root,
            private_key=key,
            certificate_chain=chain,
        )
