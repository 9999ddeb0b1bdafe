"""Error types raised by the career longevity pipeline."""

from __future__ import annotations


class LongevityError(Exception):
    """Base class for all pipeline errors."""


class SchemaError(LongevityError):
    """Required columns are missing or the label is malformed."""


class DataQualityError(LongevityError):
    """The data cannot support a split or a rebalance (empty, or a class has no rows)."""


class DegenerateFeatureError(LongevityError):
    """A feature has zero variance on the training partition."""


class UndefinedMetricError(LongevityError):
    """A confusion-matrix ratio has a zero denominator."""
