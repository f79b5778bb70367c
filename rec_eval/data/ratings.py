"""
In-memory ratings table used by every evaluation component.

This module provides:
- RatingStore: Sparse (user, item) -> preference mapping with the derived
  views needed by splitters, candidate strategies and metrics

A RatingStore is written by a single owner (a parser, a splitter or a
strategy filter) and then handed on read-only. Identifiers can be any
hashable value, but users and items must be mutually orderable (all ints or
all strings) because splitting, tie-breaking and file output sort them.
"""

import logging
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, Mapping, Optional, Set, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

Triple = Tuple[Hashable, Hashable, float]


class RatingStore:
    """
    Sparse user-item preference matrix.

    At most one value is stored per (user, item) pair; a later write for the
    same pair overwrites the earlier one. Values are not range-checked, so
    NaN and negative values are legal.

    Example:
        store = RatingStore()
        store.add_preference(1, 10, 4.0)
        store.get_preference(1, 10)   # 4.0
        store.get_preference(1, 11)   # None (absent, distinct from 0.0)
        store.get_user_items(99)      # set()
    """

    def __init__(self):
        self._preferences: Dict[Hashable, Dict[Hashable, float]] = {}
        # Item universe, kept as an insertion-ordered dict for stable iteration
        self._items: Dict[Hashable, None] = {}

    def add_preference(self, user: Hashable, item: Hashable, value: float) -> None:
        """
        Insert or overwrite the preference for (user, item).

        Args:
            user: User identifier
            item: Item identifier
            value: Preference value (rating, score, or 1.0 for implicit data)
        """
        self._preferences.setdefault(user, {})[item] = float(value)
        self._items[item] = None

    def get_users(self) -> Set[Hashable]:
        """All user identifiers with at least one preference."""
        return set(self._preferences)

    def get_items(self) -> Set[Hashable]:
        """All item identifiers rated by any user."""
        return set(self._items)

    def get_preference(self, user: Hashable, item: Hashable) -> Optional[float]:
        """
        Look up a single preference.

        Returns:
            The stored value, or None when the pair is absent
        """
        return self._preferences.get(user, {}).get(item)

    def get_user_items(self, user: Hashable) -> Set[Hashable]:
        """Items rated by the user; empty set for unknown users."""
        return set(self._preferences.get(user, ()))

    def get_user_count(self, user: Hashable) -> int:
        """Number of items rated by the user."""
        return len(self._preferences.get(user, ()))

    def get_user_preferences(self, user: Hashable) -> Mapping[Hashable, float]:
        """Read-only item -> value view for one user; empty for unknown users."""
        return MappingProxyType(self._preferences.get(user, {}))

    def items_with_value_at_least(self, user: Hashable, threshold: float) -> Set[Hashable]:
        """Items the user rated with a value >= threshold (NaN never qualifies)."""
        return {
            item
            for item, value in self._preferences.get(user, {}).items()
            if value >= threshold
        }

    def has_user(self, user: Hashable) -> bool:
        """Whether the user has at least one preference."""
        return user in self._preferences

    @property
    def num_users(self) -> int:
        """Number of unique users."""
        return len(self._preferences)

    @property
    def num_items(self) -> int:
        """Number of unique items."""
        return len(self._items)

    def num_preferences(self) -> int:
        """Total number of stored (user, item) pairs."""
        return sum(len(prefs) for prefs in self._preferences.values())

    def __len__(self) -> int:
        return self.num_preferences()

    def iter_triples(self) -> Iterator[Triple]:
        """Yield every (user, item, value) triple in insertion order."""
        for user, prefs in self._preferences.items():
            for item, value in prefs.items():
                yield user, item, value

    def __eq__(self, other) -> bool:
        if not isinstance(other, RatingStore):
            return NotImplemented
        return self._preferences == other._preferences

    def __repr__(self) -> str:
        return (
            f"RatingStore(users={self.num_users}, items={self.num_items}, "
            f"preferences={self.num_preferences()})"
        )

    @classmethod
    def from_triples(cls, triples: Iterable[Triple]) -> "RatingStore":
        """
        Build a store from (user, item, value) triples.

        Duplicated pairs follow last-write-wins.
        """
        store = cls()
        for user, item, value in triples:
            store.add_preference(user, item, value)
        return store

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        user_col: str = "user_id",
        item_col: str = "item_id",
        value_col: str = "rating",
    ) -> "RatingStore":
        """
        Build a store from a DataFrame of ratings.

        Args:
            df: DataFrame with user, item and value columns
            user_col: Name of the user column
            item_col: Name of the item column
            value_col: Name of the value column

        Returns:
            RatingStore instance
        """
        missing = [c for c in (user_col, item_col, value_col) if c not in df.columns]
        if missing:
            raise KeyError(f"DataFrame is missing columns: {missing}")

        store = cls.from_triples(
            zip(
                df[user_col].tolist(),
                df[item_col].tolist(),
                df[value_col].tolist(),
            )
        )
        logger.debug(f"Built {store!r} from DataFrame with {len(df):,} rows")
        return store

    def to_dataframe(
        self,
        user_col: str = "user_id",
        item_col: str = "item_id",
        value_col: str = "rating",
    ) -> pd.DataFrame:
        """Convert to a long-format DataFrame with one row per preference."""
        return pd.DataFrame(
            list(self.iter_triples()),
            columns=[user_col, item_col, value_col],
        )
