"""Feature scaling for the NBA career longevity model.

The logistic-regression family is fit on z-scored predictors. Scaling
parameters are learned from the training partition only and then applied
unchanged to every other partition, so no test information leaks into the
fit.

Zero-variance policy:
    A feature that is constant on the training partition is centred and
    divided by 1, so every scaled value becomes 0 on train. A warning names
    the column. Passing ``strict=True`` raises DegenerateFeatureError instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler

from .exceptions import DegenerateFeatureError, SchemaError
from .utils import get_feature_columns, get_logger


logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class ScalingParameters:
    """Per-feature mean and standard deviation fit on a training partition."""

    feature_names: List[str]
    means: pd.Series
    stds: pd.Series
    degenerate_features: List[str]

    def as_dict(self) -> Dict[str, Dict[str, float]]:
        return {
            name: {"mean": float(self.means[name]), "std": float(self.stds[name])}
            for name in self.feature_names
        }


def fit_scaler(
    train_df: pd.DataFrame,
    feature_columns: Optional[List[str]] = None,
    strict: bool = False,
) -> ScalingParameters:
    """Compute z-score parameters from the training partition.

    Args:
        train_df: Training partition (label column is ignored).
        feature_columns: Columns to scale. Defaults to every predictor.
        strict: Raise on zero-variance features instead of falling back.

    Returns:
        ScalingParameters for use with apply_scaling.
    """
    if feature_columns is None:
        feature_columns = get_feature_columns(train_df)
    missing = [col for col in feature_columns if col not in train_df.columns]
    if missing:
        raise SchemaError(f"scale: training partition is missing columns {missing}")

    scaler = StandardScaler()
    scaler.fit(train_df[feature_columns].to_numpy(dtype=float))

    degenerate = [col for col in feature_columns if train_df[col].nunique() <= 1]
    if degenerate:
        if strict:
            raise DegenerateFeatureError(
                f"scale: zero training variance in columns {degenerate}"
            )
        logger.warning("Zero training variance in %s; values will be centred only", degenerate)

    stds = pd.Series(scaler.scale_, index=feature_columns)
    stds[degenerate] = 1.0

    return ScalingParameters(
        feature_names=list(feature_columns),
        means=pd.Series(scaler.mean_, index=feature_columns),
        stds=stds,
        degenerate_features=degenerate,
    )


def apply_scaling(df: pd.DataFrame, params: ScalingParameters) -> pd.DataFrame:
    """Return a new DataFrame with the fitted features z-scored.

    Columns that are not part of the fitted features (such as Target) are
    carried over untouched.
    """
    missing = [col for col in params.feature_names if col not in df.columns]
    if missing:
        raise SchemaError(f"scale: partition is missing columns {missing}")

    scaled = df.copy()
    values = df[params.feature_names].astype(float)
    scaled[params.feature_names] = (values - params.means) / params.stds
    return scaled


def scale_split(train_df: pd.DataFrame, test_df: pd.DataFrame, strict: bool = False):
    """Fit on train and transform both partitions.

    Returns:
        Tuple of (scaled train, scaled test, ScalingParameters).
    """
    params = fit_scaler(train_df, strict=strict)
    train_scaled = apply_scaling(train_df, params)
    test_scaled = apply_scaling(test_df, params)

    logger.info(
        "Scaled %d features (max |train mean| = %.2e)",
        len(params.feature_names),
        float(np.abs(train_scaled[params.feature_names].mean()).max()),
    )
    return train_scaled, test_scaled, params
