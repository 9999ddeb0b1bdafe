"""Utility functions for the NBA career longevity model."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import pandas as pd
from sklearn.model_selection import train_test_split

from .exceptions import DataQualityError


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
OUTPUTS_DIR = PROJECT_ROOT / "outputs"
VIZ_DIR = OUTPUTS_DIR / "visualizations"

DEFAULT_DATA_PATH = Path(os.getenv("NBA_LONGEVITY_DATA", DATA_DIR / "nba_rookies.csv"))

# Column layout of a player record
NAME_COLUMN = "Name"
TARGET_COLUMN = "Target"

STAT_COLUMNS = [
    "GamesPlayed",
    "MinutesPlayed",
    "PointsPerGame",
    "FieldGoalsMade",
    "FieldGoalsAttempt",
    "FieldGoalPercent",
    "ThreePointMade",
    "ThreePointAttempt",
    "ThreePointPercent",
    "FreeThrowMade",
    "FreeThrowAttempt",
    "FreeThrowPercent",
    "OffensiveRebounds",
    "DefensiveRebounds",
    "Rebounds",
    "Assists",
    "Steals",
    "Blocks",
    "Turnovers",
]

RAW_COLUMNS = [NAME_COLUMN] + STAT_COLUMNS + [TARGET_COLUMN]

# Collinear with the shooting-efficiency predictors that are kept
DROPPED_COLUMNS = [NAME_COLUMN, "MinutesPlayed", "FieldGoalsMade", "FieldGoalsAttempt"]

FEATURE_COLUMNS = [col for col in STAT_COLUMNS if col not in DROPPED_COLUMNS]

# Label meaning
LABEL_NAMES = {0: "ROOKIE", 1: "VETERAN"}

DEFAULT_TRAIN_SIZE = 0.7
DEFAULT_RANDOM_STATE = 123
DEFAULT_THRESHOLD = 0.5

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LOGGING_CONFIGURED = False


def get_logger(name: str, log_level: str = "INFO") -> logging.Logger:
    """Return a logger under the package namespace, configuring the console handler once."""
    global _LOGGING_CONFIGURED

    root = logging.getLogger("nba_longevity")
    if not _LOGGING_CONFIGURED:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        root.addHandler(handler)
        root.setLevel(log_level)
        _LOGGING_CONFIGURED = True

    if name.startswith("nba_longevity"):
        return logging.getLogger(name)
    return root.getChild(name)


logger = get_logger(__name__)


def ensure_directories(*dirs: Path):
    """Create output directories if they don't exist."""
    for dir_path in dirs or (OUTPUTS_DIR, VIZ_DIR):
        Path(dir_path).mkdir(parents=True, exist_ok=True)


def get_feature_columns(df: pd.DataFrame) -> List[str]:
    """Get list of predictor columns (excludes the name and the label)."""
    exclude = [NAME_COLUMN, TARGET_COLUMN]
    return [col for col in df.columns if col not in exclude]


def split_features_labels(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """Separate a prepared dataset into its feature matrix and integer label vector."""
    X = df[get_feature_columns(df)]
    y = df[TARGET_COLUMN].astype(int)
    return X, y


@dataclass(frozen=True, eq=False)
class Split:
    """Disjoint stratified train/test partition of a dataset."""

    train: pd.DataFrame
    test: pd.DataFrame
    train_index: pd.Index
    test_index: pd.Index
    random_state: int


def create_train_test_split(
    df: pd.DataFrame,
    train_size: float = DEFAULT_TRAIN_SIZE,
    random_state: int = DEFAULT_RANDOM_STATE,
) -> Split:
    """Split data into train and test sets with stratification on the label.

    Args:
        df: Prepared DataFrame containing the Target column.
        train_size: Proportion of rows assigned to the training set.
        random_state: Random seed for reproducibility.

    Returns:
        Split with reset-index train/test frames and the source row labels of each.
    """
    if not 0 < train_size < 1:
        raise ValueError(f"train_size must be in (0, 1), got {train_size}")

    counts = df[TARGET_COLUMN].astype(int).value_counts()
    for label in LABEL_NAMES:
        n = int(counts.get(label, 0))
        if n < 2:
            raise DataQualityError(
                f"split: class {label} ({LABEL_NAMES[label]}) has {n} rows, "
                "at least 2 are needed to stratify"
            )

    # Stratify by label to maintain class distribution
    train_df, test_df = train_test_split(
        df,
        train_size=train_size,
        random_state=random_state,
        stratify=df[TARGET_COLUMN],
    )

    logger.info(
        "Split %d rows into %d train / %d test (seed=%d)",
        len(df), len(train_df), len(test_df), random_state,
    )

    return Split(
        train=train_df.reset_index(drop=True),
        test=test_df.reset_index(drop=True),
        train_index=train_df.index,
        test_index=test_df.index,
        random_state=random_state,
    )
