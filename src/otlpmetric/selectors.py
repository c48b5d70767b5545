"""Temporality and aggregation selectors keyed by SDK instrument type.

Selectors are opaque to the config builder; the only thing done here besides
providing defaults is guarding caller-supplied aggregation selectors so an
invalid aggregation never reaches the exporter.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Callable

from opentelemetry.sdk.metrics import (
    Counter,
    Histogram,
    ObservableCounter,
    ObservableGauge,
    ObservableUpDownCounter,
    UpDownCounter,
)
from opentelemetry.sdk.metrics.export import AggregationTemporality
from opentelemetry.sdk.metrics.view import (
    Aggregation,
    DefaultAggregation,
    ExplicitBucketHistogramAggregation,
    ExponentialBucketHistogramAggregation,
)

from otlpmetric.exceptions import InvalidAggregationError
from otlpmetric.observability.reporting import ErrorReporter

TemporalitySelector = Callable[[type], AggregationTemporality]
AggregationSelector = Callable[[type], Aggregation]

INSTRUMENT_TYPES: tuple[type, ...] = (
    Counter,
    UpDownCounter,
    Histogram,
    ObservableCounter,
    ObservableUpDownCounter,
    ObservableGauge,
)

_DELTA_TYPES = frozenset({Counter, Histogram, ObservableCounter})
_LOW_MEMORY_DELTA_TYPES = frozenset({Counter, Histogram})

# Limits of the base-2 exponential histogram scale.
_EXPO_MIN_SCALE = -10
_EXPO_MAX_SCALE = 20


def default_temporality_selector(instrument_type: type) -> AggregationTemporality:
    return AggregationTemporality.CUMULATIVE


def delta_temporality_selector(instrument_type: type) -> AggregationTemporality:
    if instrument_type in _DELTA_TYPES:
        return AggregationTemporality.DELTA
    return AggregationTemporality.CUMULATIVE


def low_memory_temporality_selector(instrument_type: type) -> AggregationTemporality:
    if instrument_type in _LOW_MEMORY_DELTA_TYPES:
        return AggregationTemporality.DELTA
    return AggregationTemporality.CUMULATIVE


def default_aggregation_selector(instrument_type: type) -> Aggregation:
    return DefaultAggregation()


def exponential_histogram_aggregation_selector(instrument_type: type) -> Aggregation:
    """Use base-2 exponential histograms for histograms, defaults elsewhere."""
    if instrument_type is Histogram:
        return ExponentialBucketHistogramAggregation()
    return DefaultAggregation()


def validate_aggregation(aggregation: object) -> None:
    """Raise InvalidAggregationError if ``aggregation`` cannot be exported."""
    if not isinstance(aggregation, Aggregation):
        raise InvalidAggregationError(
            message=f"not an aggregation: {type(aggregation).__name__}",
        )
    if isinstance(aggregation, ExplicitBucketHistogramAggregation):
        boundaries = list(getattr(aggregation, "_boundaries", None) or ())
        if any(math.isnan(b) for b in boundaries):
            raise InvalidAggregationError(message="histogram boundaries contain NaN", data={"boundaries": boundaries})
        if any(lo >= hi for lo, hi in zip(boundaries, boundaries[1:])):
            raise InvalidAggregationError(
                message="histogram boundaries are not monotonically increasing",
                data={"boundaries": boundaries},
            )
    elif isinstance(aggregation, ExponentialBucketHistogramAggregation):
        max_size = getattr(aggregation, "_max_size", 160)
        max_scale = getattr(aggregation, "_max_scale", _EXPO_MAX_SCALE)
        if max_size <= 0:
            raise InvalidAggregationError(message="exponential histogram max size must be positive", data={"max_size": max_size})
        if not _EXPO_MIN_SCALE <= max_scale <= _EXPO_MAX_SCALE:
            raise InvalidAggregationError(
                message=f"exponential histogram max scale must be within [{_EXPO_MIN_SCALE}, {_EXPO_MAX_SCALE}]",
                data={"max_scale": max_scale},
            )


def guard_aggregation_selector(selector: AggregationSelector, reporter: ErrorReporter) -> AggregationSelector:
    """Wrap ``selector`` so each aggregation is copied and validated.

    An invalid aggregation is replaced by the default one and reported.
    """

    def guarded(instrument_type: type) -> Aggregation:
        aggregation = selector(instrument_type)
        copied = copy.deepcopy(aggregation)
        try:
            validate_aggregation(copied)
        except InvalidAggregationError as exc:
            replacement = default_aggregation_selector(instrument_type)
            reporter.report(
                exc,
                "using default aggregation instead",
                aggregation=repr(aggregation),
                replacement=repr(replacement),
            )
            return replacement
        return copied

    return guarded
