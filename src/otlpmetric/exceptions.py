from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OtlpConfigError(Exception):
    """Base class for exporter configuration errors with a stable error shape.

    Builders and options never raise these; they hand them to the error
    reporter and keep the previous value.
    """

    code: int
    message: str
    data: Any | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", (self.message,))
        if self.cause is not None:
            object.__setattr__(self, "__cause__", self.cause)
            object.__setattr__(self, "__suppress_context__", True)

    def to_error_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": self.data}


@dataclass(frozen=True)
class InvalidEndpointError(OtlpConfigError):
    """Raised when an endpoint URL cannot be parsed."""

    code: int = 1001
    message: str = "Invalid endpoint"


@dataclass(frozen=True)
class InvalidAggregationError(OtlpConfigError):
    """Raised when an aggregation selector returns an unusable aggregation."""

    code: int = 1002
    message: str = "Invalid aggregation"


@dataclass(frozen=True)
class InvalidTimeoutError(OtlpConfigError):
    """Raised when a timeout or period is negative."""

    code: int = 1003
    message: str = "Invalid timeout"


@dataclass(frozen=True)
class InvalidEnvValueError(OtlpConfigError):
    """Raised when an environment variable holds a malformed value."""

    code: int = 1004
    message: str = "Invalid environment value"


@dataclass(frozen=True)
class TlsMaterialError(OtlpConfigError):
    """Raised when certificate or key material cannot be loaded."""

    code: int = 1005
    message: str = "Invalid TLS material"


@dataclass(frozen=True)
class InvalidDialOptionError(OtlpConfigError):
    """Raised when a caller dial option collides with one the builder manages."""

    code: int = 1006
    message: str = "Invalid dial option"
