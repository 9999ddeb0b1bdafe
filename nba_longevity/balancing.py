"""Class rebalancing by duplicating minority-class rows."""

from __future__ import annotations

from typing import Dict

import pandas as pd
from sklearn.utils import resample

from .exceptions import DataQualityError
from .utils import DEFAULT_RANDOM_STATE, LABEL_NAMES, TARGET_COLUMN, get_logger


logger = get_logger(__name__)


def class_counts(df: pd.DataFrame) -> Dict[int, int]:
    """Count rows per label."""
    counts = df[TARGET_COLUMN].astype(int).value_counts()
    return {label: int(counts.get(label, 0)) for label in LABEL_NAMES}


def oversample_minority(
    df: pd.DataFrame,
    random_state: int = DEFAULT_RANDOM_STATE,
) -> pd.DataFrame:
    """Oversample the minority label until both classes have the majority count.

    Every original minority row is kept and the shortfall is drawn uniformly
    with replacement from the minority rows. Majority rows appear exactly
    once. No synthetic rows are interpolated.

    Args:
        df: Prepared dataset with a binary Target column.
        random_state: Seed for the resampling draw.

    Returns:
        New DataFrame of 2 * majority-count rows, majority rows first.
    """
    counts = class_counts(df)
    for label, n in counts.items():
        if n == 0:
            raise DataQualityError(
                f"balance: class {label} ({LABEL_NAMES[label]}) has no rows"
            )

    minority = min(counts, key=counts.get)
    majority = max(counts, key=counts.get)
    n_minority, n_majority = counts[minority], counts[majority]

    if n_minority == n_majority:
        logger.info("Classes already balanced at %d rows each", n_majority)
        return df.copy().reset_index(drop=True)

    labels = df[TARGET_COLUMN].astype(int)
    majority_rows = df[labels == majority]
    minority_rows = df[labels == minority]

    extra_rows = resample(
        minority_rows,
        replace=True,
        n_samples=n_majority - n_minority,
        random_state=random_state,
    )

    balanced = pd.concat([majority_rows, minority_rows, extra_rows], ignore_index=True)
    if isinstance(df[TARGET_COLUMN].dtype, pd.CategoricalDtype):
        balanced[TARGET_COLUMN] = pd.Categorical(
            balanced[TARGET_COLUMN], categories=df[TARGET_COLUMN].cat.categories
        )

    logger.info(
        "Oversampled %s from %d to %d rows (%s kept at %d)",
        LABEL_NAMES[minority], n_minority, n_majority, LABEL_NAMES[majority], n_majority,
    )
    return balanced
