import logging
import math

import pytest

from rec_eval.data import RatingStore
from rec_eval.metrics import MAE, RMSE, ErrorMetric, MetricConfig
from rec_eval.shared_utils import ConfigurationError, MetricNotComputedError


@pytest.fixture
def truth():
    return RatingStore.from_triples([
        (1, "a", 4.0), (1, "b", 2.0),
        (2, "a", 5.0), (2, "c", 3.0),
    ])


def _shifted(store, delta):
    return RatingStore.from_triples((u, i, v + delta) for u, i, v in store.iter_triples())


def test_rmse_is_zero_for_exact_predictions(truth):
    assert RMSE(truth, truth).compute().get_value() == 0.0


def test_rmse_grows_with_uniform_noise(truth):
    values = [RMSE(_shifted(truth, d), truth).compute().get_value() for d in (0.5, 1.0, 2.0)]
    assert values == pytest.approx([0.5, 1.0, 2.0])
    assert values == sorted(values)


def test_rmse_uses_only_the_intersection(truth):
    predictions = RatingStore.from_triples([
        (1, "a", 5.0),      # error 1
        (2, "c", 1.0),      # error 2
        (1, "z", 100.0),    # not in truth
        (3, "a", 100.0),    # unknown user
    ])
    rmse = RMSE(predictions, truth).compute()
    assert rmse.num_pairs == 2
    assert rmse.get_value() == pytest.approx(math.sqrt((1.0 + 4.0) / 2))
    assert rmse.get_value_per_user() == {1: pytest.approx(1.0), 2: pytest.approx(2.0)}


def test_nan_predictions_are_skipped(truth):
    predictions = RatingStore.from_triples([(1, "a", float("nan")), (1, "b", 3.0)])
    rmse = RMSE(predictions, truth).compute()
    assert rmse.num_pairs == 1
    assert rmse.get_value() == pytest.approx(1.0)


def test_infinite_values_are_skipped(truth):
    predictions = RatingStore.from_triples([
        (1, "a", float("-inf")), (1, "b", 3.0), (2, "a", float("inf")),
    ])
    rmse = RMSE(predictions, truth).compute()
    mae = MAE(predictions, truth).compute()
    assert rmse.num_pairs == 1
    assert rmse.get_value() == pytest.approx(1.0)
    assert mae.get_value() == pytest.approx(1.0)
    assert rmse.get_value_per_user() == {1: pytest.approx(1.0)}


def test_infinite_truth_values_are_skipped():
    truth = RatingStore.from_triples([(1, "a", float("inf")), (1, "b", 2.0)])
    predictions = RatingStore.from_triples([(1, "a", 4.0), (1, "b", 4.0)])
    assert RMSE(predictions, truth).compute().get_value() == pytest.approx(2.0)


def test_error_metric_base_is_abstract(truth):
    with pytest.raises(TypeError):
        ErrorMetric(truth, truth)


def test_empty_intersection_is_undefined(truth, caplog):
    predictions = RatingStore.from_triples([(9, "x", 1.0)])
    with caplog.at_level(logging.WARNING):
        rmse = RMSE(predictions, truth).compute()
    assert rmse.get_value() is None
    assert rmse.results() == {"rmse": None}
    assert "undefined" in caplog.text


def test_mae(truth):
    predictions = RatingStore.from_triples([(1, "a", 5.0), (2, "c", 1.0)])
    assert MAE(predictions, truth).compute().get_value() == pytest.approx(1.5)


def test_error_accessors_require_compute(truth):
    with pytest.raises(MetricNotComputedError):
        RMSE(truth, truth).get_value()


def test_metric_config():
    config = MetricConfig(cutoffs=(10, 5), relevance_threshold=4)
    assert config.cutoffs == (5, 10)
    assert config.relevance_threshold == 4.0
    with pytest.raises(ConfigurationError):
        MetricConfig(cutoffs=(5, -10))
