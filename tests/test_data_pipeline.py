import numpy as np
import pandas as pd
import pytest

from conftest import make_raw_players
from nba_longevity.data_pipeline import (
    load_raw_data,
    prepare_dataset,
    summarize_dataset,
    validate_schema,
)
from nba_longevity.exceptions import DataQualityError, SchemaError
from nba_longevity.utils import DROPPED_COLUMNS, FEATURE_COLUMNS, TARGET_COLUMN


def test_prepare_drops_missing_rows_and_collinear_columns(raw_players):
    prepared = prepare_dataset(raw_players)

    assert len(prepared) == len(raw_players) - 4
    assert not prepared.isna().any().any()
    assert list(prepared.columns) == FEATURE_COLUMNS + [TARGET_COLUMN]
    assert len(FEATURE_COLUMNS) == 16
    for col in DROPPED_COLUMNS:
        assert col not in prepared.columns


def test_prepare_casts_target_to_binary_categorical(raw_players):
    prepared = prepare_dataset(raw_players)

    assert isinstance(prepared[TARGET_COLUMN].dtype, pd.CategoricalDtype)
    assert list(prepared[TARGET_COLUMN].cat.categories) == [0, 1]


def test_prepare_does_not_mutate_input(raw_players):
    before = raw_players.copy()
    prepare_dataset(raw_players)
    pd.testing.assert_frame_equal(raw_players, before)


def test_missing_target_column_raises_schema_error(raw_players):
    with pytest.raises(SchemaError, match="Target"):
        prepare_dataset(raw_players.drop(columns=[TARGET_COLUMN]))


def test_non_binary_target_raises_schema_error(raw_players):
    bad = raw_players.copy()
    bad.loc[0, TARGET_COLUMN] = 2
    with pytest.raises(SchemaError, match="0 or 1"):
        validate_schema(bad)


def test_all_rows_missing_raises_data_quality_error(raw_players):
    empty = raw_players.copy()
    empty["Steals"] = np.nan
    with pytest.raises(DataQualityError):
        prepare_dataset(empty)


def test_load_raw_data_renames_short_headers(tmp_path):
    raw = make_raw_players(n_veterans=6, n_rookies=4, seed=3)
    short = {
        "GamesPlayed": "GP", "MinutesPlayed": "MIN", "PointsPerGame": "PTS",
        "FieldGoalsMade": "FGM", "FieldGoalsAttempt": "FGA", "FieldGoalPercent": "FG%",
        "ThreePointMade": "3P Made", "ThreePointAttempt": "3PA", "ThreePointPercent": "3P%",
        "FreeThrowMade": "FTM", "FreeThrowAttempt": "FTA", "FreeThrowPercent": "FT%",
        "OffensiveRebounds": "OREB", "DefensiveRebounds": "DREB", "Rebounds": "REB",
        "Assists": "AST", "Steals": "STL", "Blocks": "BLK", "Turnovers": "TOV",
        "Target": "TARGET_5Yrs",
    }
    csv_path = tmp_path / "nba_logreg.csv"
    raw.rename(columns=short).to_csv(csv_path)

    loaded = load_raw_data(csv_path)

    assert list(loaded.columns) == list(raw.columns)
    assert len(loaded) == 10


def test_summarize_dataset_counts_classes(prepared_players):
    summary = summarize_dataset(prepared_players)

    counts = summary["class_counts"]
    assert counts["ROOKIE"] + counts["VETERAN"] == summary["total_records"]
    assert summary["n_features"] == 16
