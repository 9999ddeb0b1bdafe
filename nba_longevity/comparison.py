"""End-to-end model comparison for NBA career longevity.

Steps:
  1. Prepare the raw records (drop missing rows, drop collinear columns)
  2. Stratified 70/30 split
  3. Z-score the predictors on the training partition for the logistic family
  4. Train the decision tree and random forest on raw features and the three
     logistic regressions on scaled features
  5. Oversample the minority class, re-split the balanced data and train a
     second random forest with the same hyperparameters
  6. Evaluate every model on its own test partition and build the comparison table

Every stage returns new artifacts; none of the inputs are modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from .balancing import class_counts, oversample_minority
from .data_pipeline import load_raw_data, prepare_dataset, summarize_dataset
from .feature_engineering import ScalingParameters, scale_split
from .model_evaluation import (
    EvaluationReport,
    RocCurve,
    comparison_table,
    roc_auc,
    score_report,
)
from .model_training import (
    RandomForestTrainer,
    TrainedModel,
    default_trainers,
    train_models,
)
from .utils import (
    DEFAULT_DATA_PATH,
    DEFAULT_RANDOM_STATE,
    DEFAULT_THRESHOLD,
    DEFAULT_TRAIN_SIZE,
    Split,
    create_train_test_split,
    get_logger,
    split_features_labels,
)


logger = get_logger(__name__)

BALANCED_FOREST_NAME = "Random Forest (Balanced)"


@dataclass
class PipelineConfig:
    """Run settings for a comparison."""

    data_path: Path = DEFAULT_DATA_PATH
    train_size: float = DEFAULT_TRAIN_SIZE
    random_state: int = DEFAULT_RANDOM_STATE
    threshold: float = DEFAULT_THRESHOLD
    n_jobs: int = 1
    strict_scaling: bool = False


@dataclass
class ComparisonResult:
    """Every artifact produced by a comparison run."""

    dataset: pd.DataFrame
    balanced_dataset: pd.DataFrame
    split: Split
    balanced_split: Split
    scaling: ScalingParameters
    models: Dict[str, TrainedModel]
    reports: List[EvaluationReport]
    roc_curves: Dict[str, RocCurve]
    scored_rows: Dict[str, pd.DataFrame]
    table: pd.DataFrame
    summary: Dict = field(default_factory=dict)

    @property
    def importances(self) -> Dict[str, pd.DataFrame]:
        """Random forest importance tables keyed by model name."""
        return {
            name: model.importances
            for name, model in self.models.items()
            if model.importances is not None
        }

    def scored_predictions(self) -> pd.DataFrame:
        """Long-format per-row predictions of every model on its test partition."""
        frames = []
        for name, scored in self.scored_rows.items():
            frame = scored.copy()
            frame.insert(0, "Model", name)
            frame.insert(1, "row", scored.index)
            frames.append(frame)
        return pd.concat(frames, ignore_index=True)


def _score_rows(model: TrainedModel, test_df: pd.DataFrame, threshold: float) -> pd.DataFrame:
    X, y = split_features_labels(test_df)
    scored = model.score(X, threshold=threshold)
    scored["actual"] = y.to_numpy()
    return scored


def run_comparison(
    raw_df: pd.DataFrame,
    config: Optional[PipelineConfig] = None,
) -> ComparisonResult:
    """Run the full comparison on raw player records.

    Args:
        raw_df: Raw DataFrame with the 21 canonical columns.
        config: Run settings. Defaults to PipelineConfig().

    Returns:
        ComparisonResult holding models, reports and the comparison table.
    """
    config = config or PipelineConfig()
    seed = config.random_state

    dataset = prepare_dataset(raw_df)
    summary = summarize_dataset(dataset)
    logger.info("Prepared dataset: %s", summary)

    split = create_train_test_split(dataset, train_size=config.train_size, random_state=seed)
    train_scaled, test_scaled, scaling = scale_split(
        split.train, split.test, strict=config.strict_scaling
    )

    X_raw, y_raw = split_features_labels(split.train)
    X_scaled, y_scaled = split_features_labels(train_scaled)

    trainers = default_trainers()
    jobs = [
        (trainer, X_scaled, y_scaled) if trainer.uses_scaled_features else (trainer, X_raw, y_raw)
        for trainer in trainers
    ]

    # Second forest on duplicated-minority data with its own split
    balanced = oversample_minority(dataset, random_state=seed)
    balanced_split = create_train_test_split(
        balanced, train_size=config.train_size, random_state=seed
    )
    X_bal, y_bal = split_features_labels(balanced_split.train)
    jobs.append((RandomForestTrainer(name=BALANCED_FOREST_NAME), X_bal, y_bal))

    trained = train_models(jobs, random_state=seed, n_jobs=config.n_jobs)
    models = {model.name: model for model in trained}

    test_sets = {}
    for trainer in trainers:
        test_sets[trainer.name] = test_scaled if trainer.uses_scaled_features else split.test
    test_sets[BALANCED_FOREST_NAME] = balanced_split.test

    reports = []
    curves = {}
    scored_rows = {}
    for name, model in models.items():
        test_df = test_sets[name]
        reports.append(score_report(model, test_df, threshold=config.threshold))
        curves[name] = roc_auc(model, test_df)
        scored_rows[name] = _score_rows(model, test_df, config.threshold)

    table = comparison_table(reports)
    logger.info(
        "Compared %d models; balanced class counts %s",
        len(reports), class_counts(balanced),
    )

    return ComparisonResult(
        dataset=dataset,
        balanced_dataset=balanced,
        split=split,
        balanced_split=balanced_split,
        scaling=scaling,
        models=models,
        reports=reports,
        roc_curves=curves,
        scored_rows=scored_rows,
        table=table,
        summary=summary,
    )


def run_from_csv(
    filepath: Optional[Union[str, Path]] = None,
    config: Optional[PipelineConfig] = None,
) -> ComparisonResult:
    """Load a CSV and run the comparison."""
    config = config or PipelineConfig()
    raw_df = load_raw_data(filepath if filepath is not None else config.data_path)
    return run_comparison(raw_df, config)
