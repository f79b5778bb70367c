"""
Base class for evaluation metrics.

Every metric compares a "recommended" RatingStore (predictions, already
restricted by a candidate strategy) against a "truth" RatingStore (held-out
test data). compute() performs the full pass and caches the results; the
accessors only read the cache and raise MetricNotComputedError if compute()
has not run yet.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..data.ratings import RatingStore
from ..shared_utils import MetricNotComputedError

logger = logging.getLogger(__name__)


class Metric(ABC):
    """
    Abstract metric.

    Args:
        predictions: Recommended items with predicted scores per user
        truth: Observed test ratings per user
    """

    name: str = "metric"

    def __init__(self, predictions: RatingStore, truth: RatingStore):
        self.predictions = predictions
        self.truth = truth
        self._computed = False

    def compute(self) -> "Metric":
        """
        Run the full computation and cache the results.

        Returns:
            self, so calls can be chained: NDCG(...).compute().get_value_at(10)
        """
        self._compute()
        self._computed = True
        return self

    @property
    def is_computed(self) -> bool:
        """Whether compute() has run."""
        return self._computed

    def _require_computed(self) -> None:
        if not self._computed:
            raise MetricNotComputedError(
                f"{type(self).__name__}.compute() must be called before reading results"
            )

    @abstractmethod
    def _compute(self) -> None:
        """Compute and store results."""
        pass

    @abstractmethod
    def get_value(self) -> Optional[float]:
        """Overall metric value (None when undefined)."""
        pass

    @abstractmethod
    def results(self) -> Dict[str, Optional[float]]:
        """All values keyed by display name, e.g. {"ndcg@10": 0.41}."""
        pass
