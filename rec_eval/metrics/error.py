"""
Error metrics: RMSE and MAE.

Both are computed only over (user, item) pairs present in both the
recommended store (predicted value) and the truth store (observed value).
Pairs where either value is NaN or infinite are left out, so a recommender
that emits -inf for items it cannot score still gets an error value over
the pairs it did score.

When that intersection is empty the metric is undefined: get_value()
returns None and a warning is logged. It never silently reports 0 or NaN.
"""

import logging
import math
from abc import abstractmethod
from typing import Dict, Hashable, List, Optional, Tuple

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error

from ..data.ratings import RatingStore
from .base import Metric

logger = logging.getLogger(__name__)


def compute_rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Compute Root Mean Squared Error.

    Args:
        y_true: Actual values
        y_pred: Predicted values

    Returns:
        RMSE value
    """
    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def compute_mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """
    Compute Mean Absolute Error.

    Args:
        y_true: Actual values
        y_pred: Predicted values

    Returns:
        MAE value
    """
    return float(mean_absolute_error(y_true, y_pred))


class ErrorMetric(Metric):
    """
    Shared machinery for pointwise error metrics.

    Subclasses set name and _error_fn.
    """

    def __init__(self, predictions: RatingStore, truth: RatingStore):
        super().__init__(predictions, truth)
        self._value: Optional[float] = None
        self._per_user: Dict[Hashable, float] = {}
        self._num_pairs = 0

    @staticmethod
    @abstractmethod
    def _error_fn(y_true: np.ndarray, y_pred: np.ndarray) -> float:
        """Error between observed and predicted arrays."""

    def _pairs(self) -> Dict[Hashable, List[Tuple[float, float]]]:
        """Observed/predicted pairs per user over the store intersection."""
        pairs: Dict[Hashable, List[Tuple[float, float]]] = {}
        for user in sorted(self.truth.get_users()):
            predicted = self.predictions.get_user_preferences(user)
            for item, observed in self.truth.get_user_preferences(user).items():
                score = predicted.get(item)
                if score is None or not math.isfinite(score) or not math.isfinite(observed):
                    continue
                pairs.setdefault(user, []).append((observed, score))
        return pairs

    def _compute(self) -> None:
        pairs = self._pairs()
        self._per_user = {
            user: self._error_fn(
                np.array([o for o, _ in user_pairs]),
                np.array([p for _, p in user_pairs]),
            )
            for user, user_pairs in pairs.items()
        }

        flat = [pair for user_pairs in pairs.values() for pair in user_pairs]
        self._num_pairs = len(flat)
        if not flat:
            logger.warning(
                f"{self.name}: no (user, item) pairs shared by predictions and truth; "
                f"metric is undefined"
            )
            self._value = None
            return

        y_true = np.array([o for o, _ in flat])
        y_pred = np.array([p for _, p in flat])
        self._value = self._error_fn(y_true, y_pred)

    def get_value(self) -> Optional[float]:
        """Error over all intersecting pairs, or None when there are none."""
        self._require_computed()
        return self._value

    def get_value_per_user(self) -> Dict[Hashable, float]:
        """Error per user, for users with at least one intersecting pair."""
        self._require_computed()
        return dict(self._per_user)

    @property
    def num_pairs(self) -> int:
        """Number of (user, item) pairs the value was computed over."""
        self._require_computed()
        return self._num_pairs

    def results(self) -> Dict[str, Optional[float]]:
        return {self.name: self.get_value()}


class RMSE(ErrorMetric):
    """
    Root Mean Squared Error: sqrt(mean((predicted - observed)^2)).

    Example:
        rmse = RMSE(recommended, test).compute()
        if rmse.get_value() is not None:
            print(f"RMSE: {rmse.get_value():.4f}")
    """

    name = "rmse"

    @staticmethod
    def _error_fn(y_true: np.ndarray, y_pred: np.ndarray) -> float:
        return compute_rmse(y_true, y_pred)


class MAE(ErrorMetric):
    """Mean Absolute Error: mean(|predicted - observed|)."""

    name = "mae"

    @staticmethod
    def _error_fn(y_true: np.ndarray, y_pred: np.ndarray) -> float:
        return compute_mae(y_true, y_pred)
