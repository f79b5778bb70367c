"""
Candidate-item strategies.

A strategy decides, per user, which items are eligible to be scored. Items a
recommender returned outside that set are dropped before metrics are
computed; items inside the set that the recommender did not return count as
"not recommended".

Every strategy honours the same contract:
1. candidate_items(user) is never None (empty set for unknown users)
2. candidates are always a subset of the test store's item universe, since
   nothing outside it can be scored against ground truth
3. results are deterministic for a given (user, training, test, config);
   the sampling variant derives a per-user seed from the configured seed and
   the user id, so results do not depend on the order users are queried in

Variants are a closed set (StrategyKind); build_strategy() dispatches on the
kind. Adding a strategy means adding an enum member and a class below.
"""

import logging
import zlib
from abc import ABC, abstractmethod
from typing import Dict, Hashable, Set, Type

import numpy as np

from ..data.ratings import RatingStore
from .config import StrategyConfig, StrategyKind

logger = logging.getLogger(__name__)


class CandidateStrategy(ABC):
    """
    Abstract interface for candidate-item strategies.

    Args:
        training: Training side of the fold
        test: Test side of the fold
        config: Strategy configuration (threshold, sampling parameters)
    """

    kind: StrategyKind

    def __init__(self, training: RatingStore, test: RatingStore, config: StrategyConfig):
        self.training = training
        self.test = test
        self.config = config
        self.threshold = config.threshold
        self._test_items = test.get_items()

    @abstractmethod
    def candidate_items(self, user: Hashable) -> Set[Hashable]:
        """
        Items eligible for scoring for the given user.

        Args:
            user: User identifier

        Returns:
            Set of item identifiers (empty for unknown users)
        """
        pass

    def filter_recommendations(self, recommended: RatingStore) -> RatingStore:
        """
        Restrict a recommender's output to each user's candidate set.

        Args:
            recommended: Scored items per user as returned by a recommender

        Returns:
            New RatingStore holding only the (user, item) pairs whose item is
            a candidate for that user
        """
        filtered = RatingStore()
        dropped = 0
        for user in sorted(recommended.get_users()):
            candidates = self.candidate_items(user)
            for item, score in recommended.get_user_preferences(user).items():
                if item in candidates:
                    filtered.add_preference(user, item, score)
                else:
                    dropped += 1

        logger.debug(
            f"{self.kind.value}: kept {filtered.num_preferences():,} recommendations, "
            f"dropped {dropped:,}"
        )
        return filtered


class UserTestStrategy(CandidateStrategy):
    """Every item the user rated in the test store, regardless of value."""

    kind = StrategyKind.USER_TEST

    def candidate_items(self, user: Hashable) -> Set[Hashable]:
        return self.test.get_user_items(user)


class RelevantTestStrategy(CandidateStrategy):
    """Test items whose value meets or exceeds the relevance threshold."""

    kind = StrategyKind.RELEVANT_TEST

    def candidate_items(self, user: Hashable) -> Set[Hashable]:
        return self.test.items_with_value_at_least(user, self.threshold)


class UnseenItemsStrategy(CandidateStrategy):
    """
    Items the user has not rated in training, within the test item universe.

    This includes all of the user's own test items (relevant or not) when
    training and test are disjoint, as they are for splitter output.
    """

    kind = StrategyKind.UNSEEN_ITEMS

    def candidate_items(self, user: Hashable) -> Set[Hashable]:
        if not self.test.has_user(user) and not self.training.has_user(user):
            return set()
        return self._test_items - self.training.get_user_items(user)


class RelPlusNStrategy(CandidateStrategy):
    """
    Relevant test items plus a seeded sample of presumed-irrelevant items.

    Sampling rule:
    - pool = test item universe minus the user's training items minus the
      user's relevant test items, sorted
    - min(sample_size, len(pool)) items are drawn without replacement
    - the generator is seeded with (seed, crc32(str(user)))

    Users with no relevant test items get an empty candidate set, since
    there is nothing to rank the sampled items against.
    """

    kind = StrategyKind.REL_PLUS_N

    def _user_rng(self, user: Hashable) -> np.random.Generator:
        user_key = zlib.crc32(str(user).encode("utf-8"))
        return np.random.default_rng([self.config.seed, user_key])

    def candidate_items(self, user: Hashable) -> Set[Hashable]:
        relevant = self.test.items_with_value_at_least(user, self.threshold)
        if not relevant:
            return set()

        pool = sorted(self._test_items - self.training.get_user_items(user) - relevant)
        n = min(self.config.sample_size, len(pool))
        if n < self.config.sample_size:
            logger.debug(
                f"User {user}: only {len(pool)} non-relevant items available, "
                f"sampling {n} of {self.config.sample_size}"
            )
        if n == 0:
            return set(relevant)

        chosen = self._user_rng(user).choice(len(pool), size=n, replace=False)
        return set(relevant) | {pool[i] for i in chosen}


STRATEGIES: Dict[StrategyKind, Type[CandidateStrategy]] = {
    StrategyKind.USER_TEST: UserTestStrategy,
    StrategyKind.RELEVANT_TEST: RelevantTestStrategy,
    StrategyKind.UNSEEN_ITEMS: UnseenItemsStrategy,
    StrategyKind.REL_PLUS_N: RelPlusNStrategy,
}


def build_strategy(
    config: StrategyConfig,
    training: RatingStore,
    test: RatingStore,
) -> CandidateStrategy:
    """
    Instantiate the strategy selected by the configuration.

    Args:
        config: Strategy configuration (name already validated)
        training: Training side of the fold
        test: Test side of the fold

    Returns:
        CandidateStrategy instance
    """
    return STRATEGIES[config.kind](training, test, config)
