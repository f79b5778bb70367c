import pytest

from rec_eval.data import RatingStore


@pytest.fixture
def ratings():
    """Ten ratings from one user plus a handful from three others."""
    store = RatingStore()
    for item in range(1, 11):
        store.add_preference(1, item, float(item % 5 + 1))
    for user, item, value in [
        (2, 1, 4.0), (2, 3, 2.0), (2, 5, 5.0), (2, 7, 1.0),
        (3, 2, 3.0), (3, 4, 4.0), (3, 6, 5.0),
        (4, 9, 2.0),
    ]:
        store.add_preference(user, item, value)
    return store


@pytest.fixture
def train_test():
    """A small hand-built fold."""
    training = RatingStore.from_triples([
        (1, 10, 4.0), (1, 11, 2.0),
        (2, 10, 5.0), (2, 12, 3.0),
    ])
    test = RatingStore.from_triples([
        (1, 20, 5.0), (1, 21, 2.0), (1, 22, 3.0),
        (2, 11, 4.0), (2, 20, 1.0),
        (3, 23, 4.0),
    ])
    return training, test
