"""
Shared utilities for the evaluation engine.

This module provides common utilities used across components:
- Exception taxonomy (configuration, parsing, metric and fold errors)
- Logging setup for command-line entry points
"""

from .exceptions import (
    ConfigurationError,
    FoldError,
    MetricNotComputedError,
    ParseError,
    RecEvalError,
)
from .logging_utils import LOG_FORMAT, setup_logging

__all__ = [
    # Errors
    "RecEvalError",
    "ConfigurationError",
    "ParseError",
    "MetricNotComputedError",
    "FoldError",
    # Logging
    "LOG_FORMAT",
    "setup_logging",
]
