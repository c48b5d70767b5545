from __future__ import annotations

import pytest

from otlpmetric.exceptions import (
    InvalidAggregationError,
    InvalidDialOptionError,
    InvalidEndpointError,
    InvalidEnvValueError,
    InvalidTimeoutError,
    OtlpConfigError,
    TlsMaterialError,
)


@pytest.mark.parametrize(
    "error_type, code",
    [
        (InvalidEndpointError, 1001),
        (InvalidAggregationError, 1002),
        (InvalidTimeoutError, 1003),
        (InvalidEnvValueError, 1004),
        (TlsMaterialError, 1005),
        (InvalidDialOptionError, 1006),
    ],
)
def test_error_codes(error_type, code):
    error = error_type()

    assert isinstance(error, OtlpConfigError)
    assert error.code == code
    assert error.to_error_dict() == {"code": code, "message": error.message, "data": None}


def test_message_is_exception_text():
    error = InvalidEnvValueError(message="missing '='", data={"name": "OTEL_EXPORTER_OTLP_HEADERS"})

    assert str(error) == "missing '='"
    assert error.to_error_dict()["data"] == {"name": "OTEL_EXPORTER_OTLP_HEADERS"}


def test_cause_is_chained():
    cause = ValueError("bad port")
    error = InvalidEndpointError(message="parse url", cause=cause)

    assert error.__cause__ is cause
    with pytest.raises(InvalidEndpointError) as excinfo:
        raise error
    assert excinfo.value.cause is cause
