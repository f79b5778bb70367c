"""
Cross-validated evaluation runner.

Pipeline per fold:
1. Split the ratings into k (training, test) folds
2. Ask the injected recommender for scores for every test user
3. Restrict the scores to each user's candidate items
4. Score the filtered recommendations against the test side

Folds share no mutable state: every fold owns its own RatingStores, so
folds can run on a thread pool (max_workers > 1) with nothing but the final
averaging done across them. Results are always reported in fold order.

Usage:
    config = EvaluationConfig.from_yaml("configs/evaluation.yaml")
    evaluator = CrossValidationEvaluator(config)
    result = evaluator.run(ratings, my_recommender)
    print(result.to_dataframe().round(4))
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, List, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from ..data.ratings import RatingStore
from ..data.splitter import CrossValidationSplitter, Fold, Splitter
from ..metrics import MAE, NDCG, RMSE, Precision, Recall
from ..shared_utils import FoldError
from ..strategy import build_strategy
from .config import EvaluationConfig
from .recommender import RecommenderLike, as_recommend_fn

logger = logging.getLogger(__name__)


@dataclass
class FoldResult:
    """
    Metrics for one fold.

    Attributes:
        index: Fold index
        metrics: Metric name -> value (None when undefined, e.g. RMSE with
            no overlapping pairs)
        num_training: Preferences in the training side
        num_test: Preferences in the test side
        num_recommended: Recommendations kept after candidate filtering
    """

    index: int
    metrics: Dict[str, Optional[float]]
    num_training: int = 0
    num_test: int = 0
    num_recommended: int = 0

    def to_dict(self) -> Dict:
        """Convert to dictionary for reporting."""
        return {
            "fold": self.index,
            **self.metrics,
            "num_training": self.num_training,
            "num_test": self.num_test,
            "num_recommended": self.num_recommended,
        }


@dataclass
class EvaluationResult:
    """
    Metrics for every fold of a run.

    Attributes:
        folds: Per-fold results ordered by fold index
    """

    folds: List[FoldResult] = field(default_factory=list)

    @property
    def metric_names(self) -> List[str]:
        """Metric names in first-seen order."""
        names: Dict[str, None] = {}
        for fold in self.folds:
            for name in fold.metrics:
                names[name] = None
        return list(names)

    def mean(self) -> Dict[str, Optional[float]]:
        """
        Average each metric across folds.

        Undefined fold values are skipped; a metric undefined in every fold
        stays None.
        """
        means: Dict[str, Optional[float]] = {}
        for name in self.metric_names:
            values = [
                fold.metrics[name]
                for fold in self.folds
                if fold.metrics.get(name) is not None
            ]
            means[name] = float(np.mean(values)) if values else None
        return means

    def to_dataframe(self) -> pd.DataFrame:
        """One row per fold plus a final 'mean' row, metrics as columns."""
        columns = self.metric_names
        rows = {f"fold_{fold.index}": fold.metrics for fold in self.folds}
        rows["mean"] = self.mean()
        df = pd.DataFrame.from_dict(rows, orient="index", columns=columns)
        return df.astype(float)


def compute_metrics(
    recommended: RatingStore,
    test: RatingStore,
    config: EvaluationConfig,
) -> Dict[str, Optional[float]]:
    """
    Run every configured metric over already-filtered recommendations.

    Args:
        recommended: Candidate-filtered recommendations
        test: Held-out test ratings
        config: Evaluation configuration (cutoffs, relevance threshold)

    Returns:
        Metric name -> value
    """
    cutoffs = config.metrics.cutoffs
    threshold = config.metrics.relevance_threshold
    metrics = [
        NDCG(recommended, test, cutoffs=cutoffs),
        Precision(recommended, test, relevance_threshold=threshold, cutoffs=cutoffs),
        Recall(recommended, test, relevance_threshold=threshold, cutoffs=cutoffs),
        RMSE(recommended, test),
        MAE(recommended, test),
    ]

    results: Dict[str, Optional[float]] = {}
    for metric in metrics:
        results.update(metric.compute().results())
    return results


def evaluate_fold(
    training: RatingStore,
    test: RatingStore,
    recommended: RatingStore,
    config: EvaluationConfig,
    index: int = 0,
) -> FoldResult:
    """
    Score one fold's recommendations.

    Args:
        training: Training side of the fold
        test: Test side of the fold
        recommended: Unfiltered recommender output
        config: Evaluation configuration
        index: Fold index used in the result

    Returns:
        FoldResult for the fold
    """
    strategy = build_strategy(config.strategy, training, test)
    filtered = strategy.filter_recommendations(recommended)

    if test.num_preferences() == 0:
        logger.warning(f"Fold {index}: test side is empty")

    return FoldResult(
        index=index,
        metrics=compute_metrics(filtered, test, config),
        num_training=training.num_preferences(),
        num_test=test.num_preferences(),
        num_recommended=filtered.num_preferences(),
    )


class CrossValidationEvaluator:
    """
    Run a recommender through k-fold cross-validation.

    Args:
        config: Evaluation configuration
        splitter: Custom splitter (default: CrossValidationSplitter(config.split))
    """

    def __init__(self, config: EvaluationConfig, splitter: Optional[Splitter] = None):
        self.config = config
        self.splitter = splitter or CrossValidationSplitter(config.split)

    def _run_fold(
        self,
        fold: Fold,
        recommend_fn: Callable[[RatingStore, List[Hashable]], RatingStore],
    ) -> FoldResult:
        users = sorted(fold.test.get_users())
        try:
            recommended = recommend_fn(fold.training, users)
        except Exception as e:
            raise FoldError(fold.index, f"recommender failed: {e}") from e

        if not isinstance(recommended, RatingStore):
            raise FoldError(
                fold.index,
                f"recommender returned {type(recommended).__name__}, expected RatingStore",
            )

        try:
            result = evaluate_fold(fold.training, fold.test, recommended, self.config, fold.index)
        except Exception as e:
            raise FoldError(fold.index, f"scoring failed: {e}") from e

        logger.info(
            f"Fold {fold.index}: "
            + ", ".join(
                f"{name}={value:.4f}" if value is not None else f"{name}=n/a"
                for name, value in result.metrics.items()
            )
        )
        return result

    def run(
        self,
        store: RatingStore,
        recommender: RecommenderLike,
        show_progress: bool = False,
    ) -> EvaluationResult:
        """
        Split, recommend, filter and score every fold.

        Args:
            store: Full ratings data
            recommender: Recommender or callable(training, users) -> RatingStore
            show_progress: Whether to show a progress bar over folds

        Returns:
            EvaluationResult with one FoldResult per fold

        Raises:
            FoldError: If the recommender, candidate filtering or a metric
                fails on any fold
        """
        recommend_fn = as_recommend_fn(recommender)

        logger.info("=" * 60)
        logger.info("CROSS-VALIDATED EVALUATION")
        logger.info("=" * 60)
        logger.info(f"Config: {self.config.to_dict()}")

        folds = self.splitter.split(store)

        def run_one(fold: Fold) -> FoldResult:
            return self._run_fold(fold, recommend_fn)

        if self.config.max_workers > 1 and len(folds) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                iterator = executor.map(run_one, folds)
                results = list(
                    tqdm(iterator, total=len(folds), desc="Evaluating folds", disable=not show_progress)
                )
        else:
            iterator = folds
            if show_progress:
                iterator = tqdm(iterator, desc="Evaluating folds")
            results = [run_one(fold) for fold in iterator]

        result = EvaluationResult(folds=results)
        logger.info("Mean over folds:")
        for name, value in result.mean().items():
            logger.info(f"  {name:15} {value:.4f}" if value is not None else f"  {name:15} n/a")
        return result
