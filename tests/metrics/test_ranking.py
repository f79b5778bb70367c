import math

import pytest

from rec_eval.data import RatingStore
from rec_eval.metrics import NDCG, Precision, Recall, dcg, rank_items
from rec_eval.shared_utils import ConfigurationError, MetricNotComputedError


@pytest.fixture
def example():
    truth = RatingStore.from_triples([("u1", "i1", 5.0), ("u1", "i2", 3.0)])
    recommended = RatingStore.from_triples([
        ("u1", "i1", 5.0), ("u1", "i2", 1.0), ("u1", "i3", 4.0),
    ])
    return recommended, truth


def test_rank_items_sorts_by_score_then_item():
    scores = {"b": 1.0, "a": 1.0, "c": 2.0, "d": float("nan")}
    assert rank_items(scores) == ["c", "a", "b", "d"]


def test_dcg():
    assert dcg([]) == 0.0
    assert dcg([3.0, 2.0]) == pytest.approx(3.0 + 2.0 / math.log2(3))


def test_precision_example(example):
    recommended, truth = example
    precision = Precision(recommended, truth, relevance_threshold=3.0, cutoffs=[2]).compute()
    assert precision.get_value_at(2) == pytest.approx(0.5)


def test_ndcg_example(example):
    recommended, truth = example
    ndcg = NDCG(recommended, truth, cutoffs=[1, 2]).compute()
    idcg_2 = 5.0 + 3.0 / math.log2(3)
    assert ndcg.get_value_at(1) == pytest.approx(1.0)
    assert ndcg.get_value_at(2) == pytest.approx(5.0 / idcg_2)
    # full list: i1 (5), i3 (0), i2 (3)
    assert ndcg.get_value() == pytest.approx((5.0 + 3.0 / 2.0) / idcg_2)


def test_ndcg_is_one_for_ideal_order():
    truth = RatingStore.from_triples([(1, "a", 5.0), (1, "b", 3.0), (1, "c", 1.0)])
    recommended = RatingStore.from_triples([(1, "a", 0.9), (1, "b", 0.5), (1, "c", 0.1)])
    ndcg = NDCG(recommended, truth, cutoffs=[1, 2, 3, 10]).compute()
    for k in (1, 2, 3, 10):
        assert ndcg.get_value_at(k) == pytest.approx(1.0)


def test_ndcg_stays_in_unit_interval():
    truth = RatingStore.from_triples([
        (1, "a", 2.0), (1, "b", 5.0), (1, "c", float("nan")), (1, "d", -1.0),
        (2, "a", 4.0),
    ])
    recommended = RatingStore.from_triples([
        (1, "d", 0.9), (1, "c", 0.8), (1, "a", 0.7), (1, "z", 0.6), (1, "b", 0.1),
        (2, "x", 1.0),
    ])
    ndcg = NDCG(recommended, truth, cutoffs=[1, 2, 5]).compute()
    for k in (1, 2, 5):
        for value in ndcg.get_value_per_user_at(k).values():
            assert 0.0 <= value <= 1.0
    assert 0.0 <= ndcg.get_value() <= 1.0


def test_ties_break_by_item_id():
    truth = RatingStore.from_triples([(1, "b", 5.0)])
    recommended = RatingStore.from_triples([(1, "b", 1.0), (1, "a", 1.0)])
    ndcg = NDCG(recommended, truth, cutoffs=[1]).compute()
    assert ndcg.get_value_at(1) == 0.0


def test_truth_users_without_recommendations_count_as_zero():
    truth = RatingStore.from_triples([(1, "a", 5.0), (2, "b", 4.0)])
    recommended = RatingStore.from_triples([(1, "a", 1.0), (3, "b", 1.0)])

    ndcg = NDCG(recommended, truth, cutoffs=[5]).compute()
    assert ndcg.get_value_per_user_at(5) == {1: 1.0, 2: 0.0}
    assert ndcg.get_value_at(5) == pytest.approx(0.5)

    precision = Precision(recommended, truth, relevance_threshold=3.0, cutoffs=[1]).compute()
    assert precision.get_value_at(1) == pytest.approx(0.5)


def test_precision_divides_by_cutoff_for_short_lists():
    truth = RatingStore.from_triples([(1, "a", 5.0)])
    recommended = RatingStore.from_triples([(1, "a", 1.0)])
    precision = Precision(recommended, truth, relevance_threshold=3.0, cutoffs=[1, 5]).compute()
    assert precision.get_value_at(1) == 1.0
    assert precision.get_value_at(5) == pytest.approx(0.2)
    assert precision.get_value() == 1.0


def test_precision_is_one_when_top_k_all_relevant():
    truth = RatingStore.from_triples([(1, i, 4.0) for i in range(6)])
    recommended = RatingStore.from_triples([(1, i, 10.0 - i) for i in range(6)])
    precision = Precision(recommended, truth, relevance_threshold=4.0, cutoffs=[3, 5]).compute()
    assert precision.get_value_at(3) == 1.0
    assert precision.get_value_at(5) == 1.0


def test_recall():
    truth = RatingStore.from_triples([
        (1, "a", 5.0), (1, "b", 4.0), (1, "c", 1.0),
        (2, "d", 1.0),
    ])
    recommended = RatingStore.from_triples([(1, "a", 0.9), (1, "c", 0.8), (1, "b", 0.1)])
    recall = Recall(recommended, truth, relevance_threshold=3.0, cutoffs=[1, 3]).compute()
    assert recall.get_value_per_user_at(1) == {1: 0.5, 2: 0.0}
    assert recall.get_value_per_user_at(3) == {1: 1.0, 2: 0.0}
    assert recall.get_value_at(3) == pytest.approx(0.5)


def test_results_keys():
    truth = RatingStore.from_triples([(1, "a", 5.0)])
    ndcg = NDCG(truth, truth, cutoffs=[10, 5, 5]).compute()
    assert ndcg.cutoffs == (5, 10)
    assert set(ndcg.results()) == {"ndcg@5", "ndcg@10", "ndcg"}


def test_empty_truth_gives_zero():
    ndcg = NDCG(RatingStore(), RatingStore(), cutoffs=[5]).compute()
    assert ndcg.get_value_at(5) == 0.0
    assert ndcg.get_value() == 0.0


def test_accessors_require_compute(example):
    recommended, truth = example
    ndcg = NDCG(recommended, truth, cutoffs=[2])
    assert not ndcg.is_computed
    with pytest.raises(MetricNotComputedError):
        ndcg.get_value_at(2)
    with pytest.raises(MetricNotComputedError):
        ndcg.results()


def test_unconfigured_cutoff(example):
    recommended, truth = example
    ndcg = NDCG(recommended, truth, cutoffs=[2]).compute()
    with pytest.raises(ValueError, match="cutoff 3"):
        ndcg.get_value_at(3)


@pytest.mark.parametrize("cutoffs", [[], [0], [5, -1], [2.5]])
def test_invalid_cutoffs(example, cutoffs):
    recommended, truth = example
    with pytest.raises(ConfigurationError):
        NDCG(recommended, truth, cutoffs=cutoffs)
