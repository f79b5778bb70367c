"""
Candidate-item strategies.

Components:
- StrategyKind: Closed set of available strategies
- StrategyConfig: Strategy name, relevance threshold and sampling parameters
- CandidateStrategy: Interface exposing candidate_items(user)
- build_strategy: Instantiate the configured strategy for one fold
"""

from .config import StrategyConfig, StrategyKind
from .strategies import (
    STRATEGIES,
    CandidateStrategy,
    RelevantTestStrategy,
    RelPlusNStrategy,
    UnseenItemsStrategy,
    UserTestStrategy,
    build_strategy,
)

__all__ = [
    # Config
    "StrategyKind",
    "StrategyConfig",
    # Strategies
    "CandidateStrategy",
    "UserTestStrategy",
    "RelevantTestStrategy",
    "UnseenItemsStrategy",
    "RelPlusNStrategy",
    "STRATEGIES",
    "build_strategy",
]
