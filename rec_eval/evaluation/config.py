"""
Evaluation run configuration.

EvaluationConfig bundles the split, strategy and metric configurations into
one immutable value built once per run and passed to each component.

Example YAML:
    split:
      num_folds: 5
      per_user: true
      seed: 2048

    strategy:
      name: rel_plus_n
      threshold: 4.0
      sample_size: 100
      seed: 2048

    metrics:
      cutoffs: [5, 10]
      relevance_threshold: 4.0

    max_workers: 1
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..data.config import SplitConfig
from ..metrics.config import MetricConfig
from ..shared_utils import ConfigurationError
from ..strategy.config import StrategyConfig

SECTIONS = ("split", "strategy", "metrics", "max_workers")


def _build_section(cls, values: Any, section: str):
    if values is None:
        return cls()
    if not isinstance(values, dict):
        raise ConfigurationError(f"Section '{section}' must be a mapping, got {values!r}")
    try:
        return cls(**values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid '{section}' configuration: {e}") from e


@dataclass(frozen=True)
class EvaluationConfig:
    """
    Configuration for a complete cross-validated evaluation.

    Attributes:
        split: How the ratings are partitioned into folds
        strategy: Which candidate items are scored per user
        metrics: Ranking cutoffs and relevance threshold
        max_workers: Folds evaluated concurrently (1 = sequential)
    """

    split: SplitConfig = field(default_factory=SplitConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    metrics: MetricConfig = field(default_factory=MetricConfig)
    max_workers: int = 1

    def __post_init__(self):
        """Validate configuration."""
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise ConfigurationError(f"max_workers must be an integer, got {self.max_workers!r}")
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "EvaluationConfig":
        """
        Build a configuration from a nested dictionary.

        Args:
            config_dict: Mapping with optional split/strategy/metrics/max_workers keys

        Returns:
            EvaluationConfig instance

        Raises:
            ConfigurationError: On unknown sections or invalid values
        """
        config_dict = config_dict or {}
        unknown = set(config_dict) - set(SECTIONS)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration sections: {sorted(unknown)}. "
                f"Valid sections: {list(SECTIONS)}"
            )

        metrics = dict(config_dict.get("metrics") or {})
        if "cutoffs" in metrics and isinstance(metrics["cutoffs"], list):
            metrics["cutoffs"] = tuple(metrics["cutoffs"])

        return cls(
            split=_build_section(SplitConfig, config_dict.get("split"), "split"),
            strategy=_build_section(StrategyConfig, config_dict.get("strategy"), "strategy"),
            metrics=_build_section(MetricConfig, metrics, "metrics"),
            max_workers=config_dict.get("max_workers", 1),
        )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "EvaluationConfig":
        """
        Load evaluation configuration from YAML file.

        Args:
            yaml_path: Path to YAML config file

        Returns:
            EvaluationConfig instance
        """
        with open(yaml_path) as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict)

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging."""
        return {
            "split": self.split.to_dict(),
            "strategy": self.strategy.to_dict(),
            "metrics": self.metrics.to_dict(),
            "max_workers": self.max_workers,
        }
