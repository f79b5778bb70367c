"""
Exception taxonomy for the evaluation engine.

Error categories:
- ConfigurationError: invalid configuration, raised at setup time before any
  fold is processed (unknown strategy name, non-positive fold count, ...)
- ParseError: a malformed rating line, carrying the offending line and its
  position so the failure is actionable
- MetricNotComputedError: a metric accessor was called before compute()
- FoldError: the injected recommender failed while producing a fold

Degenerate data (users without test items, undefined RMSE) is not an error
and never raises; see the metrics package for the documented defaults.
"""

from typing import Optional


class RecEvalError(Exception):
    """Base class for all evaluation engine errors."""


class ConfigurationError(RecEvalError, ValueError):
    """Invalid configuration value."""


class ParseError(RecEvalError, ValueError):
    """
    A rating line could not be parsed.

    Attributes:
        line_number: 1-based position of the line in its source
        line: The offending line (without trailing newline)
        source: File path or other description of the input, if known
        reason: Short description of what went wrong
    """

    def __init__(
        self,
        reason: str,
        line: str,
        line_number: Optional[int] = None,
        source: Optional[str] = None,
    ):
        self.reason = reason
        self.line = line
        self.line_number = line_number
        self.source = source

        location = ""
        if source is not None:
            location += f"{source}:"
        if line_number is not None:
            location += f"{line_number}:"
        if location:
            location += " "
        super().__init__(f"{location}{reason} (line: {line!r})")


class MetricNotComputedError(RecEvalError, RuntimeError):
    """A metric result was requested before compute() was called."""


class FoldError(RecEvalError):
    """
    Processing a single fold failed.

    Attributes:
        fold_index: Index of the failing fold
    """

    def __init__(self, fold_index: int, message: str):
        self.fold_index = fold_index
        super().__init__(f"Fold {fold_index}: {message}")
