"""
Evaluate recommendation files produced outside the engine.

Reads, for each fold i:
- <split-dir>/train_<i>.tsv and <split-dir>/test_<i>.tsv (see rec_eval.data.split_data)
- <recs-dir>/recs_<i>.tsv with predicted scores, in either line format

then filters each fold's recommendations with the configured candidate
strategy and prints per-fold and mean metrics. Nothing is written to disk.

Usage:
    python -m rec_eval.evaluation.evaluate --split-dir data/splits --recs-dir data/recs --folds 5
    python -m rec_eval.evaluation.evaluate --split-dir splits --recs-dir recs --config configs/eval.yaml
    python -m rec_eval.evaluation.evaluate --split-dir splits --recs-dir recs --strategy relevant_test --threshold 4 --cutoffs 5 10
"""

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..data.rating_io import load_rating_store
from ..data.split_data import TEST_FILE_TEMPLATE, TRAIN_FILE_TEMPLATE
from ..metrics.config import MetricConfig
from ..shared_utils import ConfigurationError, setup_logging
from ..strategy.config import StrategyConfig, StrategyKind
from .config import EvaluationConfig
from .runner import EvaluationResult, evaluate_fold

logger = logging.getLogger(__name__)

RECS_FILE_TEMPLATE = "recs_{index}.tsv"


def evaluate_files(
    split_dir: Path,
    recs_dir: Path,
    num_folds: int,
    config: EvaluationConfig,
    skip_errors: bool = False,
) -> EvaluationResult:
    """
    Evaluate every fold's recommendation file.

    Args:
        split_dir: Directory with train_<i>.tsv / test_<i>.tsv
        recs_dir: Directory with recs_<i>.tsv
        num_folds: Number of folds to read
        config: Evaluation configuration
        skip_errors: Skip malformed lines instead of aborting

    Returns:
        EvaluationResult over all folds
    """
    if num_folds <= 0:
        raise ConfigurationError(f"num_folds must be positive, got {num_folds}")

    errors = "skip" if skip_errors else "raise"
    results = []
    for i in range(num_folds):
        training = load_rating_store(split_dir / TRAIN_FILE_TEMPLATE.format(index=i), errors=errors)
        test = load_rating_store(split_dir / TEST_FILE_TEMPLATE.format(index=i), errors=errors)
        recommended = load_rating_store(recs_dir / RECS_FILE_TEMPLATE.format(index=i), errors=errors)
        results.append(evaluate_fold(training, test, recommended, config, index=i))

    return EvaluationResult(folds=results)


def print_results(result: EvaluationResult) -> None:
    """Print per-fold metrics and their mean."""
    print("=" * 60)
    print("EVALUATION RESULTS")
    print("=" * 60)
    print(result.to_dataframe().round(4).to_string(na_rep="n/a"))
    print()


def build_config(args: argparse.Namespace) -> EvaluationConfig:
    """Load the YAML config (if any) and apply command-line overrides."""
    config = EvaluationConfig.from_yaml(args.config) if args.config else EvaluationConfig()

    strategy = config.strategy
    if args.strategy is not None or args.threshold is not None:
        strategy = StrategyConfig(
            name=args.strategy if args.strategy is not None else strategy.kind,
            threshold=args.threshold if args.threshold is not None else strategy.threshold,
            sample_size=strategy.sample_size,
            seed=strategy.seed,
        )

    metrics = config.metrics
    if args.cutoffs is not None or args.relevance_threshold is not None:
        metrics = MetricConfig(
            cutoffs=tuple(args.cutoffs) if args.cutoffs is not None else metrics.cutoffs,
            relevance_threshold=(
                args.relevance_threshold
                if args.relevance_threshold is not None
                else metrics.relevance_threshold
            ),
        )

    return replace(config, strategy=strategy, metrics=metrics)


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(
        description="Evaluate recommendation files against cross-validation splits"
    )
    parser.add_argument(
        "--split-dir",
        type=Path,
        required=True,
        help="Directory with train_<i>.tsv and test_<i>.tsv",
    )
    parser.add_argument(
        "--recs-dir",
        type=Path,
        required=True,
        help="Directory with recs_<i>.tsv",
    )
    parser.add_argument(
        "--folds",
        type=int,
        default=None,
        help="Number of folds (default: split.num_folds from the config)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML evaluation config",
    )
    parser.add_argument(
        "--strategy",
        type=str,
        default=None,
        choices=[kind.value for kind in StrategyKind],
        help="Candidate strategy (overrides config)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Strategy relevance threshold (overrides config)",
    )
    parser.add_argument(
        "--cutoffs",
        type=int,
        nargs="+",
        default=None,
        help="Ranking cutoffs, e.g. --cutoffs 5 10 (overrides config)",
    )
    parser.add_argument(
        "--relevance-threshold",
        type=float,
        default=None,
        help="Precision/recall relevance threshold (overrides config)",
    )
    parser.add_argument(
        "--skip-errors",
        action="store_true",
        help="Skip malformed lines instead of aborting",
    )

    args = parser.parse_args(argv)
    setup_logging()

    config = build_config(args)
    num_folds = args.folds if args.folds is not None else config.split.num_folds

    result = evaluate_files(
        args.split_dir,
        args.recs_dir,
        num_folds,
        config,
        skip_errors=args.skip_errors,
    )
    print_results(result)


if __name__ == "__main__":
    main()
