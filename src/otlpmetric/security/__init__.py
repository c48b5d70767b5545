"""Transport security for exporter connections."""

from .credentials import CredentialKind, TransportCredentials
from .mtls import TlsConfig, TlsVersion, create_client_ssl_context, load_pem_material

__all__ = [
    "CredentialKind",
    "TransportCredentials",
    "TlsConfig",
    "TlsVersion",
    "create_client_ssl_context",
    "load_pem_material",
]
