"""Model evaluation and visualization for the NBA career longevity model.

This module scores trained models against a held-out partition, builds the
cross-model comparison table, and renders optional figures for reporting.

Undefined-metric policy:
    A confusion-matrix ratio whose denominator is zero (for example precision
    when a model never predicts a veteran) is reported as NaN. The metric name
    is recorded in ``EvaluationReport.undefined_metrics`` and a warning is
    logged; evaluation of the remaining metrics continues.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from sklearn.metrics import auc, confusion_matrix, roc_curve

from .exceptions import UndefinedMetricError
from .model_training import TrainedModel
from .utils import DEFAULT_THRESHOLD, LABEL_NAMES, TARGET_COLUMN, get_logger


logger = get_logger(__name__)

# Set style for all plots
plt.style.use("seaborn-v0_8-whitegrid")
sns.set_palette("husl")

COMPARISON_COLUMNS = [
    "Model",
    "Accuracy",
    "Sensitivity",
    "Specificity",
    "Precision",
    "F1_Score",
    "AUC",
]


@dataclass(frozen=True)
class ConfusionCounts:
    """2x2 confusion matrix where positive means label 1 (veteran)."""

    tp: int
    fp: int
    tn: int
    fn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.tn + self.fn


@dataclass(frozen=True, eq=False)
class RocCurve:
    """Threshold sweep of a model's class-1 scores."""

    model_name: str
    fpr: np.ndarray
    tpr: np.ndarray
    thresholds: np.ndarray
    auc: float

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"threshold": self.thresholds, "fpr": self.fpr, "tpr": self.tpr})


@dataclass(frozen=True)
class EvaluationReport:
    """Metrics of one model on one held-out partition."""

    model_name: str
    counts: ConfusionCounts
    accuracy: float
    sensitivity: float
    specificity: float
    precision: float
    f1: float
    auc: float
    threshold: float
    undefined_metrics: Tuple[str, ...] = ()

    def as_row(self) -> Dict[str, float]:
        return {
            "Model": self.model_name,
            "Accuracy": self.accuracy,
            "Sensitivity": self.sensitivity,
            "Specificity": self.specificity,
            "Precision": self.precision,
            "F1_Score": self.f1,
            "AUC": self.auc,
        }


def confusion_counts(y_true: Sequence[int], y_pred: Sequence[int]) -> ConfusionCounts:
    """Count true/false positives and negatives for labels in {0, 1}."""
    y_true = np.asarray(y_true).astype(int)
    y_pred = np.asarray(y_pred).astype(int)
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    return ConfusionCounts(tp=int(tp), fp=int(fp), tn=int(tn), fn=int(fn))


def _ratio(name: str, numerator: float, denominator: float) -> float:
    if denominator == 0:
        raise UndefinedMetricError(f"{name} has a zero denominator")
    return numerator / denominator


def _split_xy(test_df: pd.DataFrame) -> Tuple[pd.DataFrame, np.ndarray]:
    X = test_df.drop(columns=[TARGET_COLUMN])
    y = test_df[TARGET_COLUMN].astype(int).to_numpy()
    return X, y


def roc_auc(model: TrainedModel, test_df: pd.DataFrame) -> RocCurve:
    """Sweep the decision threshold over every produced score and integrate the ROC curve.

    Args:
        model: Trained model.
        test_df: Held-out partition including Target.

    Returns:
        RocCurve with (fpr, tpr) points and the trapezoidal AUC.

    Raises:
        UndefinedMetricError: If the partition contains a single class.
    """
    X, y_true = _split_xy(test_df)
    if len(np.unique(y_true)) < 2:
        raise UndefinedMetricError(
            f"AUC of {model.name} needs both classes in the evaluation partition"
        )

    scores = model.predict_proba(X)
    fpr, tpr, thresholds = roc_curve(y_true, scores, pos_label=1, drop_intermediate=False)
    return RocCurve(
        model_name=model.name,
        fpr=fpr,
        tpr=tpr,
        thresholds=thresholds,
        auc=float(auc(fpr, tpr)),
    )


def score_report(
    model: TrainedModel,
    test_df: pd.DataFrame,
    threshold: float = DEFAULT_THRESHOLD,
) -> EvaluationReport:
    """Evaluate a model on a held-out partition.

    Args:
        model: Trained model.
        test_df: Held-out partition including Target.
        threshold: Probability at or above which a row is predicted veteran.

    Returns:
        EvaluationReport with confusion counts, ratio metrics and AUC.
    """
    X, y_true = _split_xy(test_df)
    scored = model.score(X, threshold=threshold)
    counts = confusion_counts(y_true, scored["predicted"])

    undefined: List[str] = []

    def metric(name: str, compute) -> float:
        try:
            return float(compute())
        except UndefinedMetricError as exc:
            logger.warning("%s: %s, reported as NaN", model.name, exc)
            undefined.append(name)
            return float("nan")

    accuracy = metric("accuracy", lambda: _ratio("accuracy", counts.tp + counts.tn, counts.total))
    sensitivity = metric("sensitivity", lambda: _ratio("sensitivity", counts.tp, counts.tp + counts.fn))
    specificity = metric("specificity", lambda: _ratio("specificity", counts.tn, counts.tn + counts.fp))
    precision = metric("precision", lambda: _ratio("precision", counts.tp, counts.tp + counts.fp))

    if np.isnan(precision) or np.isnan(sensitivity):
        f1 = float("nan")
        undefined.append("f1")
    else:
        f1 = metric(
            "f1",
            lambda: _ratio("f1", 2 * precision * sensitivity, precision + sensitivity),
        )

    auc_value = metric("auc", lambda: roc_auc(model, test_df).auc)

    report = EvaluationReport(
        model_name=model.name,
        counts=counts,
        accuracy=accuracy,
        sensitivity=sensitivity,
        specificity=specificity,
        precision=precision,
        f1=f1,
        auc=auc_value,
        threshold=threshold,
        undefined_metrics=tuple(undefined),
    )

    logger.info(
        "%s: accuracy=%.3f sensitivity=%.3f specificity=%.3f AUC=%.3f",
        model.name, accuracy, sensitivity, specificity, auc_value,
    )
    return report


def comparison_table(reports: Sequence[EvaluationReport]) -> pd.DataFrame:
    """One row per model with every metric, in the order given."""
    names = [report.model_name for report in reports]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate model names in comparison: {duplicates}")

    return pd.DataFrame([report.as_row() for report in reports], columns=COMPARISON_COLUMNS)


def rank_models(table: pd.DataFrame, metric: str = "AUC") -> pd.DataFrame:
    """Sort the comparison table by a caller-chosen metric, best first."""
    if metric not in COMPARISON_COLUMNS[1:]:
        raise ValueError(f"Unknown metric '{metric}', choose from {COMPARISON_COLUMNS[1:]}")
    return table.sort_values(metric, ascending=False, na_position="last").reset_index(drop=True)


def plot_confusion_matrix(
    report: EvaluationReport,
    save_path: Optional[Path] = None,
) -> plt.Figure:
    """Plot a model's confusion matrix heatmap.

    Args:
        report: Evaluation report holding the counts.
        save_path: Path to save figure (optional).

    Returns:
        Matplotlib figure.
    """
    fig, ax = plt.subplots(figsize=(6, 5))

    counts = report.counts
    cm = np.array([[counts.tn, counts.fp], [counts.fn, counts.tp]])
    labels = [LABEL_NAMES[0], LABEL_NAMES[1]]

    sns.heatmap(
        cm,
        annot=True,
        fmt="d",
        cmap="Blues",
        xticklabels=labels,
        yticklabels=labels,
        ax=ax,
    )

    ax.set_xlabel("Predicted", fontsize=12)
    ax.set_ylabel("Actual", fontsize=12)
    ax.set_title(f"Confusion Matrix - {report.model_name}", fontsize=14)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_feature_importance(
    importance_df: pd.DataFrame,
    top_n: int = 16,
    save_path: Optional[Path] = None,
) -> plt.Figure:
    """Plot horizontal bar chart of mean decrease in accuracy."""
    fig, ax = plt.subplots(figsize=(10, 8))

    top_features = importance_df.head(top_n).iloc[::-1]
    colors = plt.cm.Blues(np.linspace(0.4, 0.9, len(top_features)))

    ax.barh(
        top_features["feature"],
        top_features["mean_decrease_accuracy"],
        color=colors,
        edgecolor="navy",
        linewidth=0.5,
    )

    ax.set_xlabel("Mean decrease in accuracy", fontsize=12)
    ax.set_title("Random Forest Feature Importance", fontsize=14)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def plot_roc_curves(
    curves: Sequence[RocCurve],
    save_path: Optional[Path] = None,
) -> plt.Figure:
    """Overlay the ROC curve of every model."""
    fig, ax = plt.subplots(figsize=(8, 6))

    for curve in curves:
        ax.plot(curve.fpr, curve.tpr, lw=2, label=f"{curve.model_name} (AUC = {curve.auc:.3f})")

    ax.plot([0, 1], [0, 1], "k--", lw=1, label="Random")
    ax.set_xlabel("False Positive Rate", fontsize=12)
    ax.set_ylabel("True Positive Rate", fontsize=12)
    ax.set_title("ROC Curves", fontsize=14)
    ax.legend(loc="lower right")

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    return fig


def generate_model_report(
    table: pd.DataFrame,
    summary: Dict,
    importance_df: Optional[pd.DataFrame] = None,
    save_path: Optional[Path] = None,
) -> str:
    """Generate markdown report of the model comparison.

    Args:
        table: Comparison table from comparison_table.
        summary: Dataset summary from summarize_dataset.
        importance_df: Random forest importance table (optional).
        save_path: Path to save report (optional).

    Returns:
        Markdown report string.
    """
    class_counts = summary.get("class_counts", {})
    report_lines = [
        "# NBA Career Longevity - Model Comparison",
        "",
        "## Dataset",
        "",
        f"- **Players**: {summary.get('total_records', 'N/A')}",
        f"- **Predictors**: {summary.get('n_features', 'N/A')}",
    ]
    for label, count in class_counts.items():
        report_lines.append(f"- **{label}**: {count}")

    report_lines.extend([
        "",
        "## Test Set Performance",
        "",
        "| " + " | ".join(COMPARISON_COLUMNS) + " |",
        "|" + "|".join(["---"] * len(COMPARISON_COLUMNS)) + "|",
    ])

    for _, row in table.iterrows():
        cells = [str(row["Model"])] + [
            "n/a" if pd.isna(row[col]) else f"{row[col]:.3f}" for col in COMPARISON_COLUMNS[1:]
        ]
        report_lines.append("| " + " | ".join(cells) + " |")

    if importance_df is not None:
        report_lines.extend([
            "",
            "## Random Forest Importance (mean decrease in accuracy)",
            "",
        ])
        for i, row in importance_df.head(10).iterrows():
            report_lines.append(f"{i + 1}. {row['feature']}: {row['mean_decrease_accuracy']:.4f}")

    report_str = "\n".join(report_lines) + "\n"

    if save_path:
        with open(save_path, "w") as f:
            f.write(report_str)

    return report_str
