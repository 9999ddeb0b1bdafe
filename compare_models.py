#!/usr/bin/env python3
"""CLI tool for comparing career longevity classifiers.

Usage:
    python compare_models.py                               # Default dataset path
    python compare_models.py --data nba_logreg.csv         # Explicit CSV
    python compare_models.py --output-dir outputs --plots  # Save tables and figures

Examples:
    python compare_models.py --data data/nba_rookies.csv --seed 7
    python compare_models.py --rank-by Sensitivity
"""

import argparse
import sys
import warnings
from pathlib import Path

import matplotlib.pyplot as plt

# Suppress sklearn warnings for cleaner output
warnings.filterwarnings("ignore", category=FutureWarning)

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent))

from nba_longevity.comparison import PipelineConfig, run_from_csv
from nba_longevity.exceptions import LongevityError
from nba_longevity.model_evaluation import (
    COMPARISON_COLUMNS,
    generate_model_report,
    plot_confusion_matrix,
    plot_feature_importance,
    plot_roc_curves,
    rank_models,
)
from nba_longevity.utils import (
    DEFAULT_DATA_PATH,
    DEFAULT_RANDOM_STATE,
    DEFAULT_THRESHOLD,
    DEFAULT_TRAIN_SIZE,
    ensure_directories,
)


def print_comparison(table, rank_by):
    """Print the comparison table ranked by the chosen metric."""
    ranked = rank_models(table, rank_by)

    print("\n" + "=" * 60)
    print(f"MODEL COMPARISON (ranked by {rank_by})")
    print("=" * 60)
    print(ranked.to_string(index=False, float_format=lambda v: f"{v:.3f}"))


def save_outputs(result, output_dir: Path, plots: bool):
    """Write tables, scored predictions, the markdown report and optional figures."""
    viz_dir = output_dir / "visualizations"
    ensure_directories(output_dir)
    if plots:
        ensure_directories(viz_dir)

    result.table.to_csv(output_dir / "model_comparison.csv", index=False)
    print("  - Saved model_comparison.csv")

    result.scored_predictions().to_csv(output_dir / "scored_predictions.csv", index=False)
    print("  - Saved scored_predictions.csv")

    for name, curve in result.roc_curves.items():
        slug = name.lower().replace(" ", "_").replace("(", "").replace(")", "")
        curve.to_frame().to_csv(output_dir / f"roc_{slug}.csv", index=False)
    print(f"  - Saved {len(result.roc_curves)} ROC point files")

    importances = result.importances
    forest = importances.get("Random Forest")
    if forest is not None:
        forest.to_csv(output_dir / "feature_importances.csv", index=False)
        print("  - Saved feature_importances.csv")

    generate_model_report(
        result.table,
        result.summary,
        importance_df=forest,
        save_path=output_dir / "model_report.md",
    )
    print("  - Saved model_report.md")

    if plots:
        plot_roc_curves(list(result.roc_curves.values()), save_path=viz_dir / "roc_curves.png")
        for report in result.reports:
            slug = report.model_name.lower().replace(" ", "_").replace("(", "").replace(")", "")
            plot_confusion_matrix(report, save_path=viz_dir / f"confusion_{slug}.png")
        if forest is not None:
            plot_feature_importance(forest, save_path=viz_dir / "feature_importance.png")
        plt.close("all")
        print(f"  - Saved figures to {viz_dir}")


def main():
    parser = argparse.ArgumentParser(
        description="NBA Career Longevity Model Comparison",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--data", default=str(DEFAULT_DATA_PATH), help="Player career stats CSV")
    parser.add_argument("--train-size", type=float, default=DEFAULT_TRAIN_SIZE, help="Training fraction")
    parser.add_argument("--seed", type=int, default=DEFAULT_RANDOM_STATE, help="Random seed")
    parser.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD, help="Veteran probability cut-off")
    parser.add_argument("--n-jobs", type=int, default=1, help="Models trained in parallel")
    parser.add_argument(
        "--strict-scaling",
        action="store_true",
        help="Fail on zero-variance features instead of centring them",
    )
    parser.add_argument(
        "--rank-by",
        default="AUC",
        choices=COMPARISON_COLUMNS[1:],
        help="Metric used to order the printed table",
    )
    parser.add_argument("--output-dir", metavar="DIR", help="Save tables and report to this directory")
    parser.add_argument("--plots", action="store_true", help="Also save figures (needs --output-dir)")

    args = parser.parse_args()

    config = PipelineConfig(
        data_path=Path(args.data),
        train_size=args.train_size,
        random_state=args.seed,
        threshold=args.threshold,
        n_jobs=args.n_jobs,
        strict_scaling=args.strict_scaling,
    )

    try:
        result = run_from_csv(config=config)
    except (LongevityError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print_comparison(result.table, args.rank_by)

    undefined = [r for r in result.reports if r.undefined_metrics]
    for report in undefined:
        print(f"  ! {report.model_name}: undefined {', '.join(report.undefined_metrics)}")

    if args.output_dir:
        print("\nSaving outputs...")
        save_outputs(result, Path(args.output_dir), args.plots)


if __name__ == "__main__":
    main()
