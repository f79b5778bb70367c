"""
CLI entry point for creating cross-validation splits.

This script:
1. Loads a ratings file (tab-separated or bracketed list form)
2. Splits it into k train/test folds (per-user by default)
3. Writes train_<i>.tsv and test_<i>.tsv for every fold

Usage:
    python -m rec_eval.data.split_data --input data/ml-100k/u.data --output-dir data/splits
    python -m rec_eval.data.split_data --input u.data --output-dir splits --folds 10 --global --seed 7
"""

import argparse
import logging
from pathlib import Path
from typing import List

from ..shared_utils import setup_logging
from .config import DEFAULT_SEED, SplitConfig
from .rating_io import load_rating_store, save_rating_store
from .splitter import CrossValidationSplitter, Fold

logger = logging.getLogger(__name__)

TRAIN_FILE_TEMPLATE = "train_{index}.tsv"
TEST_FILE_TEMPLATE = "test_{index}.tsv"


def write_folds(folds: List[Fold], output_dir: Path) -> None:
    """
    Write each fold's training and test sides.

    Args:
        folds: Folds to write
        output_dir: Directory for train_<i>.tsv / test_<i>.tsv
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    for fold in folds:
        save_rating_store(fold.training, output_dir / TRAIN_FILE_TEMPLATE.format(index=fold.index))
        save_rating_store(fold.test, output_dir / TEST_FILE_TEMPLATE.format(index=fold.index))


def create_splits(
    input_path: Path,
    output_dir: Path,
    config: SplitConfig,
    skip_errors: bool = False,
) -> List[Fold]:
    """
    Load, split and save.

    Args:
        input_path: Ratings file
        output_dir: Directory to write folds to
        config: Split configuration
        skip_errors: Skip malformed lines instead of aborting

    Returns:
        The folds that were written
    """
    logger.info("=" * 60)
    logger.info("CROSS-VALIDATION SPLITS")
    logger.info("=" * 60)
    logger.info(f"Config: {config.to_dict()}")

    store = load_rating_store(input_path, errors="skip" if skip_errors else "raise")
    folds = CrossValidationSplitter(config).split(store)
    write_folds(folds, output_dir)

    logger.info("=" * 60)
    logger.info(f"Splits written to {output_dir}")
    logger.info("=" * 60)
    for fold in folds:
        logger.info(
            f"  Fold {fold.index}: train={fold.training.num_preferences():,}  "
            f"test={fold.test.num_preferences():,}"
        )
    return folds


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Split a ratings file into k train/test folds"
    )
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Ratings file (user \\t item \\t value per line)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data/splits"),
        help="Directory to write train_<i>.tsv / test_<i>.tsv",
    )
    parser.add_argument(
        "--folds",
        type=int,
        default=5,
        help="Number of folds (default: 5)",
    )
    parser.add_argument(
        "--global",
        dest="per_user",
        action="store_false",
        help="Split over all ratings instead of per user",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Shuffle seed (default: {DEFAULT_SEED})",
    )
    parser.add_argument(
        "--skip-errors",
        action="store_true",
        help="Skip malformed lines instead of aborting",
    )

    args = parser.parse_args(argv)
    setup_logging()

    config = SplitConfig(num_folds=args.folds, per_user=args.per_user, seed=args.seed)
    create_splits(args.input, args.output_dir, config, skip_errors=args.skip_errors)


if __name__ == "__main__":
    main()
