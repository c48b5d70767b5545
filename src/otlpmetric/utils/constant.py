from enum import StrEnum

DEFAULT_COLLECTOR_HOST = "localhost"
DEFAULT_COLLECTOR_HTTP_PORT = 4318
DEFAULT_COLLECTOR_GRPC_PORT = 4317

# Default URL path for the endpoint that receives metrics.
DEFAULT_METRICS_PATH = "/v1/metrics"

# Max time (seconds) the backend is given to process each metrics batch.
DEFAULT_TIMEOUT = 10.0

DEFAULT_ENV_NAMESPACE = "OTEL_EXPORTER_OTLP"


class Transport(StrEnum):
    """Transports an exporter config can be built for."""
    HTTP = "http"
    GRPC = "grpc"


class Compression(StrEnum):
    """Payload compression applied by the exporter transport."""
    NONE = "none"
    GZIP = "gzip"
