"""Data pipeline for the NBA career longevity model.

This module handles loading the rookie career statistics, validating the
schema, and preparing the cleaned dataset used by every model.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from .exceptions import DataQualityError, SchemaError
from .utils import (
    DEFAULT_DATA_PATH,
    DROPPED_COLUMNS,
    LABEL_NAMES,
    NAME_COLUMN,
    RAW_COLUMNS,
    STAT_COLUMNS,
    TARGET_COLUMN,
    get_logger,
)


logger = get_logger(__name__)

# Short headers used by the public rookie dataset
COLUMN_ALIASES = {
    "GP": "GamesPlayed",
    "MIN": "MinutesPlayed",
    "PTS": "PointsPerGame",
    "FGM": "FieldGoalsMade",
    "FGA": "FieldGoalsAttempt",
    "FG%": "FieldGoalPercent",
    "3P Made": "ThreePointMade",
    "3PA": "ThreePointAttempt",
    "3P%": "ThreePointPercent",
    "FTM": "FreeThrowMade",
    "FTA": "FreeThrowAttempt",
    "FT%": "FreeThrowPercent",
    "OREB": "OffensiveRebounds",
    "DREB": "DefensiveRebounds",
    "REB": "Rebounds",
    "AST": "Assists",
    "STL": "Steals",
    "BLK": "Blocks",
    "TOV": "Turnovers",
    "TARGET_5Yrs": TARGET_COLUMN,
}


def load_raw_data(filepath: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """Load raw career stats CSV data.

    Args:
        filepath: Path to CSV file. Uses default path if None.

    Returns:
        Raw DataFrame with canonical column names.
    """
    if filepath is None:
        filepath = DEFAULT_DATA_PATH

    df = pd.read_csv(filepath)

    # Drop unnamed index column if present
    if "Unnamed: 0" in df.columns:
        df = df.drop(columns=["Unnamed: 0"])

    df = df.rename(columns={"name": NAME_COLUMN, **COLUMN_ALIASES})
    logger.info("Loaded %d rows x %d columns from %s", len(df), len(df.columns), filepath)
    return df


def _coerce_numeric_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Convert statistic columns to numeric, turning unparseable values into NaN."""
    for col in STAT_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def validate_schema(df: pd.DataFrame) -> None:
    """Check that every required column exists and the label is binary.

    Raises:
        SchemaError: If columns are missing or Target has values outside {0, 1}.
    """
    missing = [col for col in RAW_COLUMNS if col not in df.columns]
    if missing:
        raise SchemaError(f"prepare: missing required columns {missing}")

    labels = pd.to_numeric(df[TARGET_COLUMN].dropna(), errors="coerce")
    bad = sorted(set(df[TARGET_COLUMN].dropna()[labels.isna() | ~labels.isin([0, 1])].astype(str)))
    if bad:
        raise SchemaError(
            f"prepare: column '{TARGET_COLUMN}' must only contain 0 or 1, found {bad[:5]}"
        )


def prepare_dataset(df: pd.DataFrame) -> pd.DataFrame:
    """Apply all cleaning operations to raw records.

    Rows with any missing value are removed (no imputation), the name and the
    collinear minutes/field-goal counts are dropped, and Target becomes a
    two-level categorical.

    Args:
        df: Raw DataFrame with the 21 canonical columns.

    Returns:
        New DataFrame with 16 predictors and the Target column.
    """
    validate_schema(df)

    df = df[RAW_COLUMNS].copy()
    df = _coerce_numeric_columns(df)
    df[TARGET_COLUMN] = pd.to_numeric(df[TARGET_COLUMN], errors="coerce")

    n_raw = len(df)
    df = df.dropna().reset_index(drop=True)
    if df.empty:
        raise DataQualityError(f"prepare: all {n_raw} rows contain missing values")
    logger.info("Removed %d rows with missing values, %d remain", n_raw - len(df), len(df))

    df = df.drop(columns=DROPPED_COLUMNS)
    df[TARGET_COLUMN] = pd.Categorical(df[TARGET_COLUMN].astype(int), categories=[0, 1])

    return df


def load_and_prepare_data(filepath: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """Convenience function to load and prepare data in one step."""
    return prepare_dataset(load_raw_data(filepath))


def summarize_dataset(df: pd.DataFrame) -> Dict:
    """Generate summary counts about a prepared dataset.

    Args:
        df: Prepared DataFrame.

    Returns:
        Dictionary with row, class and feature counts.
    """
    counts = df[TARGET_COLUMN].astype(int).value_counts()
    return {
        "total_records": len(df),
        "n_features": len([c for c in df.columns if c != TARGET_COLUMN]),
        "class_counts": {
            LABEL_NAMES[label]: int(counts.get(label, 0)) for label in LABEL_NAMES
        },
        "veteran_share": float(counts.get(1, 0)) / len(df) if len(df) else float("nan"),
    }
