import pandas as pd
import pytest

from conftest import make_raw_players
from nba_longevity.data_pipeline import prepare_dataset
from nba_longevity.exceptions import DataQualityError
from nba_longevity.utils import TARGET_COLUMN, create_train_test_split


def test_split_is_deterministic_for_a_seed(prepared_players):
    first = create_train_test_split(prepared_players, random_state=42)
    second = create_train_test_split(prepared_players, random_state=42)

    assert list(first.train_index) == list(second.train_index)
    assert list(first.test_index) == list(second.test_index)
    pd.testing.assert_frame_equal(first.train, second.train)


def test_different_seeds_give_different_partitions(prepared_players):
    first = create_train_test_split(prepared_players, random_state=1)
    second = create_train_test_split(prepared_players, random_state=2)

    assert set(first.test_index) != set(second.test_index)


def test_split_is_disjoint_and_covers_every_row(prepared_players):
    split = create_train_test_split(prepared_players, random_state=7)

    assert len(split.train) + len(split.test) == len(prepared_players)
    assert set(split.train_index).isdisjoint(split.test_index)
    assert set(split.train_index) | set(split.test_index) == set(prepared_players.index)


def test_split_preserves_label_proportions(prepared_players):
    split = create_train_test_split(prepared_players, random_state=7)
    overall = (prepared_players[TARGET_COLUMN].astype(int) == 1).mean()

    for part in (split.train, split.test):
        share = (part[TARGET_COLUMN].astype(int) == 1).mean()
        assert abs(share - overall) < 1 / len(part)


def test_seventy_thirty_split_of_cleaned_rows():
    raw = make_raw_players(n_veterans=1017, n_rookies=323, seed=11, n_missing=11)
    prepared = prepare_dataset(raw)

    split = create_train_test_split(prepared, train_size=0.7, random_state=5)

    assert len(prepared) == 1329
    assert abs(len(split.train) - 0.7 * len(prepared)) <= 1
    assert abs(len(split.test) - 0.3 * len(prepared)) <= 1


def test_invalid_train_size_raises(prepared_players):
    with pytest.raises(ValueError):
        create_train_test_split(prepared_players, train_size=1.0)


def test_single_class_dataset_cannot_be_split(prepared_players):
    veterans = prepared_players[prepared_players[TARGET_COLUMN].astype(int) == 1]
    with pytest.raises(DataQualityError, match="class 0"):
        create_train_test_split(veterans)
