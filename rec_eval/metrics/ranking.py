"""
Ranking metrics: NDCG@K, Precision@K, Recall@K.

Ranked-list construction:
- A user's recommended items are sorted by predicted score, descending
- Ties break by item identifier, ascending
- NaN scores rank after every real score

Averaging policy:
- Metrics are computed per user and macro-averaged over every user with at
  least one truth item
- A truth user missing from the recommended store scores 0 and still
  counts in the average (users are not excluded)
- Users that appear only in the recommended store are ignored, since
  there is nothing to measure them against

Each metric accepts several cutoffs and computes all of them in one pass.
get_value() reports the metric over the full ranked list (no cutoff).
"""

import logging
import math
from abc import abstractmethod
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from ..data.ratings import RatingStore
from .base import Metric
from .config import validate_cutoffs

logger = logging.getLogger(__name__)


def _rank_key(entry):
    item, score = entry
    if math.isnan(score):
        return (1, 0.0, item)
    return (0, -score, item)


def rank_items(scores: Mapping[Hashable, float]) -> List[Hashable]:
    """
    Order items by score descending, ties by item id ascending.

    Args:
        scores: Item -> predicted score

    Returns:
        Item ids, best first
    """
    return [item for item, _ in sorted(scores.items(), key=_rank_key)]


def graded_relevance(value: Optional[float]) -> float:
    """Truth value used as gain; absent, NaN and non-positive values give 0."""
    if value is None or math.isnan(value) or value <= 0:
        return 0.0
    return value


def dcg(relevances: Sequence[float]) -> float:
    """
    Discounted cumulative gain.

    DCG = sum(rel_i / log2(i + 1)) for ranks i = 1..len(relevances)
    """
    if len(relevances) == 0:
        return 0.0
    relevances = np.asarray(relevances, dtype=float)
    positions = np.arange(1, len(relevances) + 1)
    return float(np.sum(relevances / np.log2(positions + 1)))


class RankingMetric(Metric):
    """
    Shared machinery for per-user, per-cutoff ranking metrics.

    Subclasses implement _user_values(ranked, user) returning the user's
    value at each cutoff plus the full-list value.

    Args:
        predictions: Recommended items with predicted scores
        truth: Held-out test ratings
        cutoffs: Cutoffs k (positive integers)
    """

    def __init__(
        self,
        predictions: RatingStore,
        truth: RatingStore,
        cutoffs: Iterable[int] = (5, 10),
    ):
        super().__init__(predictions, truth)
        self.cutoffs = validate_cutoffs(cutoffs)
        self._per_user_at: Dict[int, Dict[Hashable, float]] = {}
        self._per_user: Dict[Hashable, float] = {}
        self._value_at: Dict[int, float] = {}
        self._value: float = 0.0

    @abstractmethod
    def _user_values(self, ranked: List[Hashable], user: Hashable) -> Dict[Optional[int], float]:
        """Values for one user keyed by cutoff, with None for the full list."""
        pass

    def _compute(self) -> None:
        self._per_user_at = {k: {} for k in self.cutoffs}
        self._per_user = {}

        users = sorted(self.truth.get_users())
        missing = 0
        for user in users:
            if not self.predictions.has_user(user):
                missing += 1
            ranked = rank_items(self.predictions.get_user_preferences(user))
            values = self._user_values(ranked, user)
            for k in self.cutoffs:
                self._per_user_at[k][user] = values[k]
            self._per_user[user] = values[None]

        if missing:
            logger.debug(
                f"{self.name}: {missing} of {len(users)} truth users have no "
                f"recommendations and score 0"
            )

        self._value_at = {
            k: float(np.mean(list(per_user.values()))) if per_user else 0.0
            for k, per_user in self._per_user_at.items()
        }
        self._value = float(np.mean(list(self._per_user.values()))) if self._per_user else 0.0

    def _check_cutoff(self, k: int) -> None:
        if k not in self._per_user_at:
            raise ValueError(
                f"{type(self).__name__} was not configured with cutoff {k}; "
                f"available cutoffs: {list(self.cutoffs)}"
            )

    def get_value(self) -> float:
        """Macro-average over users of the metric on the full ranked list."""
        self._require_computed()
        return self._value

    def get_value_at(self, k: int) -> float:
        """Macro-average over users at cutoff k."""
        self._require_computed()
        self._check_cutoff(k)
        return self._value_at[k]

    def get_value_per_user(self) -> Dict[Hashable, float]:
        """Per-user values on the full ranked list."""
        self._require_computed()
        return dict(self._per_user)

    def get_value_per_user_at(self, k: int) -> Dict[Hashable, float]:
        """Per-user values at cutoff k."""
        self._require_computed()
        self._check_cutoff(k)
        return dict(self._per_user_at[k])

    def results(self) -> Dict[str, float]:
        self._require_computed()
        out = {f"{self.name}@{k}": self._value_at[k] for k in self.cutoffs}
        out[self.name] = self._value
        return out


class NDCG(RankingMetric):
    """
    Normalized Discounted Cumulative Gain with graded relevance.

    The gain of a ranked item is its raw truth rating (0 when the item has no
    truth entry). IDCG@k ranks the user's truth ratings in descending order.
    NDCG@k = DCG@k / IDCG@k, and 0 when IDCG@k = 0.

    Example:
        ndcg = NDCG(recommended, test, cutoffs=[5, 10]).compute()
        ndcg.get_value_at(10)
    """

    name = "ndcg"

    def _user_values(self, ranked: List[Hashable], user: Hashable) -> Dict[Optional[int], float]:
        truth = self.truth.get_user_preferences(user)
        gains = [graded_relevance(truth.get(item)) for item in ranked]
        ideal = sorted((graded_relevance(v) for v in truth.values()), reverse=True)

        values: Dict[Optional[int], float] = {}
        for k in list(self.cutoffs) + [None]:
            idcg = dcg(ideal[:k])
            values[k] = dcg(gains[:k]) / idcg if idcg > 0 else 0.0
        return values


class Precision(RankingMetric):
    """
    Precision@k: relevant items in the top k, divided by k.

    The denominator is always the cutoff, so a list shorter than k is still
    divided by k. Relevant means truth value >= relevance_threshold.
    Without a cutoff, precision is hits / list length (0 for empty lists).

    Args:
        predictions: Recommended items with predicted scores
        truth: Held-out test ratings
        relevance_threshold: Minimum relevant truth value
        cutoffs: Cutoffs k
    """

    name = "precision"

    def __init__(
        self,
        predictions: RatingStore,
        truth: RatingStore,
        relevance_threshold: float = 3.0,
        cutoffs: Iterable[int] = (5, 10),
    ):
        super().__init__(predictions, truth, cutoffs)
        self.relevance_threshold = relevance_threshold

    def _user_values(self, ranked: List[Hashable], user: Hashable) -> Dict[Optional[int], float]:
        relevant = self.truth.items_with_value_at_least(user, self.relevance_threshold)
        values: Dict[Optional[int], float] = {
            k: sum(1 for item in ranked[:k] if item in relevant) / k
            for k in self.cutoffs
        }
        hits = sum(1 for item in ranked if item in relevant)
        values[None] = hits / len(ranked) if ranked else 0.0
        return values


class Recall(RankingMetric):
    """
    Recall@k: relevant items in the top k, divided by all relevant items.

    Users with truth items but none above the threshold score 0.

    Args:
        predictions: Recommended items with predicted scores
        truth: Held-out test ratings
        relevance_threshold: Minimum relevant truth value
        cutoffs: Cutoffs k
    """

    name = "recall"

    def __init__(
        self,
        predictions: RatingStore,
        truth: RatingStore,
        relevance_threshold: float = 3.0,
        cutoffs: Iterable[int] = (5, 10),
    ):
        super().__init__(predictions, truth, cutoffs)
        self.relevance_threshold = relevance_threshold

    def _user_values(self, ranked: List[Hashable], user: Hashable) -> Dict[Optional[int], float]:
        relevant = self.truth.items_with_value_at_least(user, self.relevance_threshold)
        if not relevant:
            return {k: 0.0 for k in list(self.cutoffs) + [None]}
        values: Dict[Optional[int], float] = {
            k: sum(1 for item in ranked[:k] if item in relevant) / len(relevant)
            for k in self.cutoffs
        }
        values[None] = sum(1 for item in ranked if item in relevant) / len(relevant)
        return values
