"""NBA Career Longevity - predict whether a rookie lasts five or more seasons."""

__version__ = "1.0.0"

from .balancing import class_counts, oversample_minority
from .comparison import ComparisonResult, PipelineConfig, run_comparison, run_from_csv
from .data_pipeline import (
    load_and_prepare_data,
    load_raw_data,
    prepare_dataset,
    summarize_dataset,
    validate_schema,
)
from .exceptions import (
    DataQualityError,
    DegenerateFeatureError,
    LongevityError,
    SchemaError,
    UndefinedMetricError,
)
from .feature_engineering import ScalingParameters, apply_scaling, fit_scaler
from .model_evaluation import (
    EvaluationReport,
    RocCurve,
    comparison_table,
    rank_models,
    roc_auc,
    score_report,
)
from .model_training import (
    Classifier,
    DecisionTreeTrainer,
    LassoLogisticTrainer,
    LogisticRegressionTrainer,
    RandomForestTrainer,
    RidgeLogisticTrainer,
    TrainedModel,
)
from .utils import FEATURE_COLUMNS, Split, create_train_test_split

__all__ = [
    "class_counts",
    "oversample_minority",
    "ComparisonResult",
    "PipelineConfig",
    "run_comparison",
    "run_from_csv",
    "load_and_prepare_data",
    "load_raw_data",
    "prepare_dataset",
    "summarize_dataset",
    "validate_schema",
    "DataQualityError",
    "DegenerateFeatureError",
    "LongevityError",
    "SchemaError",
    "UndefinedMetricError",
    "ScalingParameters",
    "apply_scaling",
    "fit_scaler",
    "EvaluationReport",
    "RocCurve",
    "comparison_table",
    "rank_models",
    "roc_auc",
    "score_report",
    "Classifier",
    "DecisionTreeTrainer",
    "LassoLogisticTrainer",
    "LogisticRegressionTrainer",
    "RandomForestTrainer",
    "RidgeLogisticTrainer",
    "TrainedModel",
    "FEATURE_COLUMNS",
    "Split",
    "create_train_test_split",
]
