"""
Evaluation module.

This module provides:
- EvaluationConfig: Immutable split/strategy/metric configuration per run
- Recommender: The injected scoring capability
- CrossValidationEvaluator: Split, recommend, filter and score every fold
- evaluate_fold: Score one fold's already-produced recommendations
"""

from .config import EvaluationConfig
from .recommender import Recommender, as_recommend_fn
from .runner import (
    CrossValidationEvaluator,
    EvaluationResult,
    FoldResult,
    compute_metrics,
    evaluate_fold,
)

__all__ = [
    "EvaluationConfig",
    "Recommender",
    "as_recommend_fn",
    "CrossValidationEvaluator",
    "EvaluationResult",
    "FoldResult",
    "compute_metrics",
    "evaluate_fold",
]
