"""
Offline evaluation engine for recommender algorithms.

Components, leaf-first:
- data: RatingStore, rating file I/O, cross-validation splitting
- strategy: per-user candidate-item strategies
- metrics: NDCG, Precision, Recall, RMSE, MAE
- evaluation: configuration and the cross-validation runner
"""

from .data import CrossValidationSplitter, RatingStore, SplitConfig
from .evaluation import CrossValidationEvaluator, EvaluationConfig, evaluate_fold
from .metrics import MAE, NDCG, RMSE, MetricConfig, Precision, Recall
from .strategy import StrategyConfig, StrategyKind, build_strategy

__version__ = "0.1.0"

__all__ = [
    "RatingStore",
    "SplitConfig",
    "CrossValidationSplitter",
    "StrategyKind",
    "StrategyConfig",
    "build_strategy",
    "MetricConfig",
    "NDCG",
    "Precision",
    "Recall",
    "RMSE",
    "MAE",
    "EvaluationConfig",
    "CrossValidationEvaluator",
    "evaluate_fold",
]
