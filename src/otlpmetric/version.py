from __future__ import annotations

import importlib.metadata

DISTRIBUTION_NAME = "otlpmetric-config"


def get_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION_NAME)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_user_agent() -> str:
    """User agent sent to the collector by the gRPC transport."""
    return f"OTel OTLP Exporter Python/{get_version()}"
