"""
Recommender capability consumed by the evaluation runner.

The engine never trains a model. It asks an injected recommender for scored
items, given the training side of a fold and the users to recommend for.
Anything with a matching recommend() method, or a plain callable with the
same signature, can be plugged in.
"""

from typing import Callable, Hashable, List, Protocol, Union, runtime_checkable

from ..data.ratings import RatingStore


@runtime_checkable
class Recommender(Protocol):
    """Produces predicted scores per user from a training store."""

    def recommend(self, training: RatingStore, users: List[Hashable]) -> RatingStore:
        """
        Score items for the requested users.

        Args:
            training: Training side of the fold
            users: Users to produce recommendations for (sorted)

        Returns:
            RatingStore of user -> item -> predicted score
        """
        ...


RecommenderLike = Union[Recommender, Callable[[RatingStore, List[Hashable]], RatingStore]]


def as_recommend_fn(
    recommender: RecommenderLike,
) -> Callable[[RatingStore, List[Hashable]], RatingStore]:
    """
    Normalize a Recommender or callable into a plain function.

    Raises:
        TypeError: If the object is neither
    """
    if isinstance(recommender, Recommender):
        return recommender.recommend
    if callable(recommender):
        return recommender
    raise TypeError(
        f"Expected a Recommender or callable, got {type(recommender).__name__}"
    )
