"""Model training for NBA career longevity prediction.

This module defines the five classifiers compared by the pipeline. Every
trainer exposes the same capability: ``fit(X, y, random_state)`` returns a
TrainedModel whose ``score(X)`` gives the class-1 probability and the
thresholded label for each row. Hyperparameters are fixed on the trainer
instance; the seed is passed per call.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator
from sklearn.ensemble import RandomForestClassifier
from sklearn.inspection import permutation_importance
from sklearn.linear_model import LogisticRegression, LogisticRegressionCV
from sklearn.model_selection import StratifiedKFold
from sklearn.tree import DecisionTreeClassifier

from .exceptions import SchemaError
from .utils import DEFAULT_RANDOM_STATE, DEFAULT_THRESHOLD, get_logger


logger = get_logger(__name__)


@dataclass
class TrainedModel:
    """A fitted estimator together with the columns and settings it was trained with."""

    name: str
    estimator: BaseEstimator
    feature_names: List[str]
    params: Dict
    random_state: int
    importances: Optional[pd.DataFrame] = None

    def _align(self, X: pd.DataFrame) -> pd.DataFrame:
        missing = [col for col in self.feature_names if col not in X.columns]
        if missing:
            raise SchemaError(f"score: {self.name} is missing feature columns {missing}")
        return X[self.feature_names]

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Probability of label 1 (veteran) for each row."""
        proba = self.estimator.predict_proba(self._align(X))
        positive = list(self.estimator.classes_).index(1)
        return proba[:, positive]

    def score(self, X: pd.DataFrame, threshold: float = DEFAULT_THRESHOLD) -> pd.DataFrame:
        """Score rows.

        Returns:
            DataFrame indexed like X with 'probability' and 'predicted' columns.
        """
        probability = self.predict_proba(X)
        return pd.DataFrame(
            {
                "probability": probability,
                "predicted": (probability >= threshold).astype(int),
            },
            index=X.index,
        )


class Classifier:
    """Base trainer. Subclasses are dataclasses whose fields are the hyperparameters."""

    name: str = "Classifier"
    uses_scaled_features: bool = False

    def build_estimator(self, random_state: int) -> BaseEstimator:
        raise NotImplementedError

    def hyperparameters(self) -> Dict:
        params = asdict(self)
        params.pop("name", None)
        return params

    def fit(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        random_state: int = DEFAULT_RANDOM_STATE,
    ) -> TrainedModel:
        """Train on a feature matrix and label vector."""
        y = pd.Series(y).astype(int).to_numpy()
        if len(np.unique(y)) != 2:
            raise ValueError(f"{self.name}: training labels must contain both classes")

        estimator = self.build_estimator(random_state)
        estimator.fit(X, y)

        model = TrainedModel(
            name=self.name,
            estimator=estimator,
            feature_names=list(X.columns),
            params=self.hyperparameters(),
            random_state=random_state,
        )
        self._after_fit(model, X, y)

        logger.info("Trained %s on %d rows x %d features", self.name, len(X), X.shape[1])
        return model

    def _after_fit(self, model: TrainedModel, X: pd.DataFrame, y: np.ndarray) -> None:
        pass


@dataclass
class DecisionTreeTrainer(Classifier):
    """Single classification tree, kept as an interpretable baseline."""

    criterion: str = "gini"
    min_samples_split: int = 20
    min_samples_leaf: int = 7
    name: str = "Decision Tree"

    def build_estimator(self, random_state: int) -> BaseEstimator:
        return DecisionTreeClassifier(
            criterion=self.criterion,
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            random_state=random_state,
        )


@dataclass
class RandomForestTrainer(Classifier):
    """Bagged trees with random feature subsets and mean-decrease-accuracy importance."""

    n_estimators: int = 405
    max_features: int = 4
    min_samples_leaf: int = 5
    importance: bool = True
    importance_repeats: int = 5
    name: str = "Random Forest"

    def build_estimator(self, random_state: int) -> BaseEstimator:
        return RandomForestClassifier(
            n_estimators=self.n_estimators,
            max_features=self.max_features,
            min_samples_leaf=self.min_samples_leaf,
            bootstrap=True,
            random_state=random_state,
            n_jobs=-1,
        )

    def _after_fit(self, model: TrainedModel, X: pd.DataFrame, y: np.ndarray) -> None:
        if self.importance:
            model.importances = feature_importances(
                model, X, y, n_repeats=self.importance_repeats
            )


@dataclass
class LogisticRegressionTrainer(Classifier):
    """Unpenalized maximum-likelihood logistic regression."""

    max_iter: int = 5000
    name: str = "Logistic Regression"

    uses_scaled_features = True

    def build_estimator(self, random_state: int) -> BaseEstimator:
        return LogisticRegression(penalty=None, solver="lbfgs", max_iter=self.max_iter)


@dataclass
class PenalizedLogisticTrainer(LogisticRegressionTrainer):
    """Logistic regression whose penalty strength is picked by stratified k-fold deviance."""

    penalty: str = "l2"
    n_strengths: int = 20
    cv_folds: int = 10
    name: str = "Penalized Logistic Regression"

    def build_estimator(self, random_state: int) -> BaseEstimator:
        solver = "liblinear" if self.penalty == "l1" else "lbfgs"
        return LogisticRegressionCV(
            Cs=self.n_strengths,
            cv=StratifiedKFold(n_splits=self.cv_folds, shuffle=True, random_state=random_state),
            penalty=self.penalty,
            solver=solver,
            scoring="neg_log_loss",
            max_iter=self.max_iter,
            random_state=random_state,
        )

    def _after_fit(self, model: TrainedModel, X: pd.DataFrame, y: np.ndarray) -> None:
        strength = float(model.estimator.C_[0])
        model.params["selected_C"] = strength
        logger.info("%s selected C=%.4g (lambda=%.4g)", self.name, strength, 1.0 / strength)


@dataclass
class RidgeLogisticTrainer(PenalizedLogisticTrainer):
    penalty: str = "l2"
    name: str = "Ridge Logistic Regression"


@dataclass
class LassoLogisticTrainer(PenalizedLogisticTrainer):
    penalty: str = "l1"
    name: str = "Lasso Logistic Regression"

    def _after_fit(self, model: TrainedModel, X: pd.DataFrame, y: np.ndarray) -> None:
        super()._after_fit(model, X, y)
        dropped = zero_coefficient_features(model)
        if dropped:
            logger.info("%s zeroed %d features: %s", self.name, len(dropped), dropped)


def default_trainers() -> List[Classifier]:
    """The five model families compared on the original split."""
    return [
        DecisionTreeTrainer(),
        RandomForestTrainer(),
        LogisticRegressionTrainer(),
        RidgeLogisticTrainer(),
        LassoLogisticTrainer(),
    ]


def feature_importances(
    model: TrainedModel,
    X: pd.DataFrame,
    y: Sequence[int],
    n_repeats: int = 5,
) -> pd.DataFrame:
    """Mean decrease in accuracy (permutation) and in Gini impurity per feature.

    Args:
        model: Trained forest.
        X: Rows to permute.
        y: Labels of those rows.
        n_repeats: Permutations per feature.

    Returns:
        DataFrame sorted by mean_decrease_accuracy, descending.
    """
    X = X[model.feature_names]
    result = permutation_importance(
        model.estimator,
        X,
        np.asarray(y).astype(int),
        scoring="accuracy",
        n_repeats=n_repeats,
        random_state=model.random_state,
    )

    importance_df = pd.DataFrame({
        "feature": model.feature_names,
        "mean_decrease_accuracy": result.importances_mean,
        "mean_decrease_accuracy_std": result.importances_std,
        "mean_decrease_gini": model.estimator.feature_importances_,
    })

    importance_df = importance_df.sort_values(
        ["mean_decrease_accuracy", "feature"], ascending=[False, True]
    )
    return importance_df.reset_index(drop=True)


def coefficients(model: TrainedModel) -> pd.DataFrame:
    """Per-feature coefficients of a logistic-family model, largest magnitude first."""
    estimator = model.estimator
    if not hasattr(estimator, "coef_"):
        raise TypeError(f"{model.name} has no linear coefficients")

    coef_df = pd.DataFrame({
        "feature": model.feature_names,
        "coefficient": estimator.coef_[0],
    })
    coef_df["abs_coefficient"] = coef_df["coefficient"].abs()
    coef_df = coef_df.sort_values("abs_coefficient", ascending=False).reset_index(drop=True)
    coef_df.attrs["intercept"] = float(estimator.intercept_[0])
    return coef_df


def zero_coefficient_features(model: TrainedModel) -> List[str]:
    """Features the L1 penalty removed from the model."""
    coef_df = coefficients(model)
    return sorted(coef_df.loc[coef_df["coefficient"] == 0, "feature"].tolist())


def train_models(
    jobs: Sequence[Tuple[Classifier, pd.DataFrame, pd.Series]],
    random_state: int = DEFAULT_RANDOM_STATE,
    n_jobs: int = 1,
) -> List[TrainedModel]:
    """Train independent (trainer, X, y) jobs, optionally in parallel.

    Each job receives the same explicit seed, so the result does not depend on
    the execution order or on n_jobs.
    """
    if n_jobs == 1:
        return [trainer.fit(X, y, random_state) for trainer, X, y in jobs]

    return Parallel(n_jobs=n_jobs)(
        delayed(trainer.fit)(X, y, random_state) for trainer, X, y in jobs
    )
