"""
Configuration dataclasses for data splitting.

Configurations are immutable and validated on construction, so an invalid
value fails at setup time rather than partway through an evaluation.
"""

from dataclasses import dataclass

from ..shared_utils import ConfigurationError

DEFAULT_SEED = 2048


@dataclass(frozen=True)
class SplitConfig:
    """
    Configuration for k-fold cross-validation splitting.

    Attributes:
        num_folds: Number of folds (must be positive)
        per_user: Split each user's ratings independently (default: True).
            Only per-user splitting guarantees every user appears in every
            fold's test set.
        seed: Seed for the shuffle preceding bucketing
    """

    num_folds: int = 5
    per_user: bool = True
    seed: int = DEFAULT_SEED

    def __post_init__(self):
        """Validate configuration."""
        if isinstance(self.num_folds, bool) or not isinstance(self.num_folds, int):
            raise ConfigurationError(f"num_folds must be an integer, got {self.num_folds!r}")
        if self.num_folds <= 0:
            raise ConfigurationError(f"num_folds must be positive, got {self.num_folds}")
        if self.seed < 0:
            raise ConfigurationError(f"seed must be non-negative, got {self.seed}")

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging."""
        return {
            "num_folds": self.num_folds,
            "per_user": self.per_user,
            "seed": self.seed,
        }
