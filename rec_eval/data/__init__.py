"""
Data module for the evaluation engine.

This module handles:
- RatingStore: in-memory sparse ratings table
- Text I/O for tab-separated and bracketed list rating files
- Cross-validation and random holdout splitting
"""

from .config import DEFAULT_SEED, SplitConfig
from .rating_io import load_rating_store, parse_line, read_ratings, save_rating_store
from .ratings import RatingStore
from .splitter import CrossValidationSplitter, Fold, RandomSplitter, Splitter, split_store

__all__ = [
    "DEFAULT_SEED",
    "SplitConfig",
    "RatingStore",
    "parse_line",
    "read_ratings",
    "load_rating_store",
    "save_rating_store",
    "Splitter",
    "Fold",
    "CrossValidationSplitter",
    "RandomSplitter",
    "split_store",
]
