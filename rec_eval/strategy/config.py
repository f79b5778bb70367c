"""
Configuration for candidate-item strategies.

A strategy is selected by name from a closed set of variants. The name is
resolved when the configuration is built, so a typo fails at setup time
instead of in the middle of an evaluation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..data.config import DEFAULT_SEED
from ..shared_utils import ConfigurationError


class StrategyKind(Enum):
    """Available candidate-item strategies."""
    USER_TEST = "user_test"            # every item the user rated in test
    RELEVANT_TEST = "relevant_test"    # test items with value >= threshold
    UNSEEN_ITEMS = "unseen_items"      # test item universe minus the user's training items
    REL_PLUS_N = "rel_plus_n"          # relevant test items + N sampled non-relevant unseen items

    @classmethod
    def from_name(cls, name: Union[str, "StrategyKind"]) -> "StrategyKind":
        """
        Resolve a strategy name.

        Raises:
            ConfigurationError: If the name is not a known strategy
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            valid = [kind.value for kind in cls]
            raise ConfigurationError(
                f"Unknown candidate strategy: {name!r}. Valid strategies: {valid}"
            ) from None


@dataclass(frozen=True)
class StrategyConfig:
    """
    Configuration for a candidate-item strategy.

    Attributes:
        name: Strategy name or StrategyKind (resolved to StrategyKind)
        threshold: Relevance threshold; test values >= threshold are relevant
        sample_size: Non-relevant items sampled per user (rel_plus_n only)
        seed: Sampling seed (rel_plus_n only)
    """

    name: Union[str, StrategyKind] = StrategyKind.USER_TEST
    threshold: float = 3.0
    sample_size: int = 100
    seed: int = DEFAULT_SEED
    kind: StrategyKind = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Resolve the strategy name and validate parameters."""
        object.__setattr__(self, "kind", StrategyKind.from_name(self.name))
        object.__setattr__(self, "name", self.kind.value)
        try:
            object.__setattr__(self, "threshold", float(self.threshold))
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"threshold must be numeric, got {self.threshold!r}"
            ) from None
        if self.seed < 0:
            raise ConfigurationError(f"seed must be non-negative, got {self.seed}")
        if self.sample_size < 0:
            raise ConfigurationError(
                f"sample_size must be non-negative, got {self.sample_size}"
            )

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging."""
        return {
            "name": self.name,
            "threshold": self.threshold,
            "sample_size": self.sample_size,
            "seed": self.seed,
        }
