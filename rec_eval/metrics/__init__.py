"""
Metric library for offline evaluation.

Ranking metrics (per user, macro-averaged, several cutoffs per pass):
- NDCG: graded-relevance normalized discounted cumulative gain
- Precision: relevant items in the top k over k
- Recall: relevant items in the top k over all relevant items

Error metrics (over the predicted/observed intersection):
- RMSE, MAE
"""

from .base import Metric
from .config import MetricConfig, validate_cutoffs
from .error import MAE, RMSE, ErrorMetric, compute_mae, compute_rmse
from .ranking import NDCG, Precision, RankingMetric, Recall, dcg, rank_items

__all__ = [
    "Metric",
    "MetricConfig",
    "validate_cutoffs",
    # Ranking
    "RankingMetric",
    "NDCG",
    "Precision",
    "Recall",
    "rank_items",
    "dcg",
    # Error
    "ErrorMetric",
    "RMSE",
    "MAE",
    "compute_rmse",
    "compute_mae",
]
