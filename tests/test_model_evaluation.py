import logging

import numpy as np
import pandas as pd
import pytest

from nba_longevity.exceptions import UndefinedMetricError
from nba_longevity.model_evaluation import (
    COMPARISON_COLUMNS,
    confusion_counts,
    comparison_table,
    generate_model_report,
    plot_confusion_matrix,
    plot_roc_curves,
    rank_models,
    roc_auc,
    score_report,
)
from nba_longevity.model_training import TrainedModel
from nba_longevity.utils import TARGET_COLUMN


class ColumnScorer:
    """Uses one column directly as the class-1 probability."""

    classes_ = np.array([0, 1])

    def __init__(self, column):
        self.column = column

    def predict_proba(self, X):
        p = np.asarray(X[self.column], dtype=float)
        return np.column_stack([1 - p, p])


def _model(name="Scorer"):
    return TrainedModel(
        name=name,
        estimator=ColumnScorer("score"),
        feature_names=["score"],
        params={},
        random_state=0,
    )


def _frame(scores, labels):
    return pd.DataFrame({"score": scores, TARGET_COLUMN: labels})


def test_confusion_counts_treat_veteran_as_positive():
    counts = confusion_counts([1, 1, 0, 0, 1], [1, 0, 0, 1, 1])
    assert (counts.tp, counts.fp, counts.tn, counts.fn) == (2, 1, 1, 1)
    assert counts.total == 5


def test_score_report_metrics():
    test_df = _frame([0.9, 0.8, 0.3, 0.6, 0.2, 0.7], [1, 1, 1, 0, 0, 0])
    report = score_report(_model(), test_df)

    counts = report.counts
    assert (counts.tp, counts.fp, counts.tn, counts.fn) == (2, 2, 1, 1)
    assert report.accuracy == (counts.tp + counts.tn) / counts.total
    assert report.sensitivity == pytest.approx(2 / 3)
    assert report.specificity == pytest.approx(1 / 3)
    assert report.precision == pytest.approx(0.5)
    assert report.f1 == pytest.approx(2 * 0.5 * (2 / 3) / (0.5 + 2 / 3))
    assert report.undefined_metrics == ()


def test_metrics_lie_in_unit_interval():
    rng = np.random.default_rng(0)
    labels = rng.integers(0, 2, 300)
    scores = np.clip(labels * 0.3 + rng.uniform(0, 0.7, 300), 0, 1)
    report = score_report(_model(), _frame(scores, labels))

    for value in report.as_row().values():
        if isinstance(value, float):
            assert 0 <= value <= 1


def test_zero_denominator_reported_as_nan(caplog):
    test_df = _frame([0.1, 0.2, 0.3, 0.4], [1, 0, 1, 0])

    with caplog.at_level(logging.WARNING, logger="nba_longevity"):
        report = score_report(_model("Never Veteran"), test_df)

    assert np.isnan(report.precision)
    assert np.isnan(report.f1)
    assert report.sensitivity == 0
    assert report.accuracy == 0.5
    assert "precision" in report.undefined_metrics
    assert "f1" in report.undefined_metrics
    assert "Never Veteran" in caplog.text


def test_single_class_partition_has_undefined_auc():
    test_df = _frame([0.7, 0.8, 0.9], [1, 1, 1])

    report = score_report(_model(), test_df)
    assert np.isnan(report.auc)
    assert np.isnan(report.specificity)

    with pytest.raises(UndefinedMetricError):
        roc_auc(_model(), test_df)


def test_random_scorer_auc_near_half():
    rng = np.random.default_rng(42)
    labels = np.array([0, 1] * 5000)
    curve = roc_auc(_model(), _frame(rng.uniform(size=labels.size), labels))
    assert curve.auc == pytest.approx(0.5, abs=0.03)


def test_perfect_scorer_auc_is_one():
    labels = np.array([0] * 50 + [1] * 50)
    scores = np.concatenate([np.linspace(0.0, 0.4, 50), np.linspace(0.6, 1.0, 50)])
    curve = roc_auc(_model(), _frame(scores, labels))

    assert curve.auc == 1.0
    assert curve.fpr[0] == 0 and curve.tpr[-1] == 1
    assert list(curve.to_frame().columns) == ["threshold", "fpr", "tpr"]


def test_comparison_table_and_ranking():
    test_df = _frame([0.9, 0.8, 0.3, 0.6, 0.2, 0.7], [1, 1, 1, 0, 0, 0])
    good = score_report(_model("Good"), test_df)
    bad = score_report(_model("Bad"), _frame([0.1, 0.2, 0.9, 0.8, 0.7, 0.6], [1, 1, 1, 0, 0, 0]))

    table = comparison_table([bad, good])
    assert list(table.columns) == COMPARISON_COLUMNS
    assert table["Model"].tolist() == ["Bad", "Good"]
    assert rank_models(table, "AUC")["Model"].tolist() == ["Good", "Bad"]

    with pytest.raises(ValueError):
        rank_models(table, "Recall")
    with pytest.raises(ValueError, match="Duplicate"):
        comparison_table([good, good])


def test_report_rendering(tmp_path):
    test_df = _frame([0.9, 0.8, 0.3, 0.6, 0.2, 0.7], [1, 1, 1, 0, 0, 0])
    report = score_report(_model(), test_df)
    table = comparison_table([report])
    summary = {"total_records": 6, "n_features": 1, "class_counts": {"ROOKIE": 3, "VETERAN": 3}}

    text = generate_model_report(table, summary, save_path=tmp_path / "report.md")
    assert "| Scorer |" in text
    assert (tmp_path / "report.md").read_text() == text

    plot_roc_curves([roc_auc(_model(), test_df)], save_path=tmp_path / "roc.png")
    plot_confusion_matrix(report, save_path=tmp_path / "cm.png")
    assert (tmp_path / "roc.png").exists()
    assert (tmp_path / "cm.png").exists()
