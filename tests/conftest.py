import numpy as np
import pandas as pd
import pytest

from nba_longevity.data_pipeline import prepare_dataset
from nba_longevity.utils import RAW_COLUMNS, STAT_COLUMNS


def make_raw_players(n_veterans, n_rookies, seed=0, n_missing=0):
    """Synthetic career stats where veterans play more and score more."""
    rng = np.random.default_rng(seed)
    n = n_veterans + n_rookies
    target = np.array([1] * n_veterans + [0] * n_rookies)
    rng.shuffle(target)

    skill = target * 1.0 + rng.normal(0, 0.8, n)
    data = {"Name": [f"Player {i}" for i in range(n)]}
    for j, col in enumerate(STAT_COLUMNS):
        base = 5.0 + j
        data[col] = np.round(base + skill * (1 + j % 3) + rng.normal(0, 1.5, n), 2)
    data["Target"] = target

    df = pd.DataFrame(data)[RAW_COLUMNS]
    if n_missing:
        rows = rng.choice(n, size=n_missing, replace=False)
        cols = rng.choice(STAT_COLUMNS, size=n_missing)
        for row, col in zip(rows, cols):
            df.loc[row, col] = np.nan
    return df


@pytest.fixture
def raw_players():
    return make_raw_players(n_veterans=180, n_rookies=90, seed=1, n_missing=4)


@pytest.fixture
def prepared_players(raw_players):
    return prepare_dataset(raw_players)
