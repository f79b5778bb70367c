"""
Configuration for metric computation.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from ..shared_utils import ConfigurationError


def validate_cutoffs(cutoffs: Iterable[int]) -> Tuple[int, ...]:
    """
    Validate ranking cutoffs.

    Args:
        cutoffs: Cutoff values (e.g. [5, 10])

    Returns:
        Sorted, de-duplicated tuple of cutoffs

    Raises:
        ConfigurationError: If the list is empty or any cutoff is not a
            positive integer
    """
    if isinstance(cutoffs, int):
        cutoffs = [cutoffs]
    cutoffs = list(cutoffs)
    if not cutoffs:
        raise ConfigurationError("At least one cutoff is required")
    for k in cutoffs:
        if isinstance(k, bool) or not isinstance(k, int):
            raise ConfigurationError(f"Cutoffs must be integers, got {k!r}")
        if k <= 0:
            raise ConfigurationError(f"Cutoffs must be positive, got {k}")
    return tuple(sorted(set(cutoffs)))


@dataclass(frozen=True)
class MetricConfig:
    """
    Configuration for ranking and error metrics.

    Attributes:
        cutoffs: Ranking cutoffs k, each reported separately (default: 5, 10)
        relevance_threshold: Minimum truth value counted as relevant for
            Precision@k and Recall@k
    """

    cutoffs: Tuple[int, ...] = (5, 10)
    relevance_threshold: float = 3.0

    def __post_init__(self):
        """Validate configuration."""
        object.__setattr__(self, "cutoffs", validate_cutoffs(self.cutoffs))
        try:
            object.__setattr__(self, "relevance_threshold", float(self.relevance_threshold))
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"relevance_threshold must be numeric, got {self.relevance_threshold!r}"
            ) from None

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging."""
        return {
            "cutoffs": list(self.cutoffs),
            "relevance_threshold": self.relevance_threshold,
        }
