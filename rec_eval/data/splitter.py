"""
Train/test splitting of a RatingStore.

Strategy:
- CrossValidationSplitter: k-fold cross-validation. Ratings are shuffled with
  a seeded generator and dealt round-robin into k buckets; fold i tests on
  bucket i and trains on every other bucket.
- RandomSplitter: a single random holdout split at a training ratio.

Both work either per user (each user's ratings are shuffled and dealt
independently, so every user with at least k ratings appears in every test
set) or globally over all (user, item, value) triples.

Determinism: users and items are visited in sorted order and a single
numpy Generator seeded with the configured seed drives every shuffle, so the
same store, fold count and seed always give the same folds regardless of the
order the store was populated in.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Hashable, List, Tuple

import numpy as np

from ..shared_utils import ConfigurationError
from .config import DEFAULT_SEED, SplitConfig
from .ratings import RatingStore, Triple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fold:
    """
    One train/test partition.

    Attributes:
        index: Fold index (0..num_folds-1)
        training: Training side
        test: Held-out test side
    """

    index: int
    training: RatingStore
    test: RatingStore


class Splitter(ABC):
    """Interface for components that partition a RatingStore into folds."""

    @abstractmethod
    def split(self, store: RatingStore) -> List[Fold]:
        """
        Partition the store.

        Args:
            store: Ratings to split (not modified)

        Returns:
            Folds ordered by index
        """
        pass


def _user_triples(store: RatingStore, user: Hashable) -> List[Triple]:
    prefs = store.get_user_preferences(user)
    return [(user, item, prefs[item]) for item in sorted(prefs)]


def _all_triples(store: RatingStore) -> List[Triple]:
    triples = []
    for user in sorted(store.get_users()):
        triples.extend(_user_triples(store, user))
    return triples


def _shuffled(triples: List[Triple], rng: np.random.Generator) -> List[Triple]:
    order = rng.permutation(len(triples))
    return [triples[i] for i in order]


def _groups(store: RatingStore, per_user: bool) -> List[List[Triple]]:
    """Groups of triples shuffled independently: one per user, or one overall."""
    if per_user:
        return [_user_triples(store, user) for user in sorted(store.get_users())]
    return [_all_triples(store)]


class CrossValidationSplitter(Splitter):
    """
    K-fold cross-validation splitter.

    Each group (a user's ratings, or all ratings in global mode) is shuffled
    and dealt round-robin: the j-th shuffled rating goes to bucket j % k.
    When a group's size is not divisible by k, the lower-indexed buckets
    receive the extra ratings.

    The test sides of all folds partition the input exactly once per
    (user, item) pair; the training side of fold i holds everything not in
    test side i.

    Example:
        splitter = CrossValidationSplitter(SplitConfig(num_folds=5, seed=42))
        for fold in splitter.split(store):
            print(fold.index, len(fold.training), len(fold.test))
    """

    def __init__(self, config: SplitConfig):
        """
        Initialize the splitter.

        Args:
            config: Split configuration (validated on construction)
        """
        self.config = config

    def split(self, store: RatingStore) -> List[Fold]:
        num_folds = self.config.num_folds
        rng = np.random.default_rng(self.config.seed)

        trainings = [RatingStore() for _ in range(num_folds)]
        tests = [RatingStore() for _ in range(num_folds)]

        for group in _groups(store, self.config.per_user):
            for position, (user, item, value) in enumerate(_shuffled(group, rng)):
                bucket = position % num_folds
                for fold_index in range(num_folds):
                    target = tests if fold_index == bucket else trainings
                    target[fold_index].add_preference(user, item, value)

        folds = [
            Fold(index=i, training=trainings[i], test=tests[i])
            for i in range(num_folds)
        ]

        mode = "per-user" if self.config.per_user else "global"
        logger.info(
            f"Split {store.num_preferences():,} preferences into {num_folds} "
            f"{mode} folds (seed={self.config.seed})"
        )
        for fold in folds:
            logger.debug(
                f"Fold {fold.index}: train={fold.training.num_preferences():,}, "
                f"test={fold.test.num_preferences():,}"
            )
        if store.num_preferences() == 0:
            logger.warning("Input store is empty; all folds are empty")

        return folds


class RandomSplitter(Splitter):
    """
    Single random holdout split.

    Each group is shuffled and the first round(len * training_ratio) ratings
    go to training, the rest to test. Returns a single fold.

    Args:
        training_ratio: Fraction of each group kept for training, in (0, 1)
        per_user: Split each user's ratings independently
        seed: Shuffle seed
    """

    def __init__(
        self,
        training_ratio: float = 0.8,
        per_user: bool = True,
        seed: int = DEFAULT_SEED,
    ):
        if not 0.0 < training_ratio < 1.0:
            raise ConfigurationError(
                f"training_ratio must be in (0, 1), got {training_ratio}"
            )
        self.training_ratio = training_ratio
        self.per_user = per_user
        self.seed = seed

    def split(self, store: RatingStore) -> List[Fold]:
        rng = np.random.default_rng(self.seed)
        training = RatingStore()
        test = RatingStore()

        for group in _groups(store, self.per_user):
            shuffled = _shuffled(group, rng)
            cut = int(round(len(shuffled) * self.training_ratio))
            for position, (user, item, value) in enumerate(shuffled):
                target = training if position < cut else test
                target.add_preference(user, item, value)

        logger.info(
            f"Random split ({self.training_ratio:.0%} training, seed={self.seed}): "
            f"train={training.num_preferences():,}, test={test.num_preferences():,}"
        )
        return [Fold(index=0, training=training, test=test)]


def split_store(
    store: RatingStore,
    num_folds: int = 5,
    per_user: bool = True,
    seed: int = DEFAULT_SEED,
) -> List[Tuple[RatingStore, RatingStore]]:
    """
    Convenience wrapper returning (training, test) pairs.

    Args:
        store: Ratings to split
        num_folds: Number of folds
        per_user: Per-user (True) or global (False) splitting
        seed: Shuffle seed

    Returns:
        List of (training, test) pairs ordered by fold index

    Raises:
        ConfigurationError: If num_folds is not positive
    """
    config = SplitConfig(num_folds=num_folds, per_user=per_user, seed=seed)
    return [(f.training, f.test) for f in CrossValidationSplitter(config).split(store)]
