import math

import pytest

from rec_eval.data import RatingStore, SplitConfig
from rec_eval.evaluation import runner
from rec_eval.evaluation import (
    CrossValidationEvaluator,
    EvaluationConfig,
    EvaluationResult,
    FoldResult,
    evaluate_fold,
)
from rec_eval.metrics import MetricConfig
from rec_eval.shared_utils import FoldError
from rec_eval.strategy import StrategyConfig


def make_oracle(full):
    """Recommends every unseen item with its true rating."""
    def recommend(training, users):
        out = RatingStore()
        for user in users:
            seen = training.get_user_items(user)
            for item, value in full.get_user_preferences(user).items():
                if item not in seen:
                    out.add_preference(user, item, value)
        return out
    return recommend


class PopularityRecommender:
    """Scores every item by its training count."""

    def recommend(self, training, users):
        counts = {}
        for _, item, _ in training.iter_triples():
            counts[item] = counts.get(item, 0) + 1
        out = RatingStore()
        for user in users:
            for item, count in counts.items():
                out.add_preference(user, item, float(count))
        return out


def _config(**kwargs):
    return EvaluationConfig(
        split=SplitConfig(num_folds=kwargs.pop("num_folds", 2), seed=3),
        strategy=StrategyConfig(kwargs.pop("strategy", "user_test"), threshold=3.0),
        metrics=MetricConfig(cutoffs=(1, 3), relevance_threshold=3.0),
        **kwargs,
    )


def test_oracle_scores_perfectly(ratings):
    result = CrossValidationEvaluator(_config()).run(ratings, make_oracle(ratings))
    assert len(result.folds) == 2
    mean = result.mean()
    assert mean["ndcg@1"] == pytest.approx(1.0)
    assert mean["ndcg@3"] == pytest.approx(1.0)
    assert mean["rmse"] == pytest.approx(0.0)
    assert mean["mae"] == pytest.approx(0.0)


def test_run_is_deterministic(ratings):
    evaluator = CrossValidationEvaluator(_config(num_folds=3, strategy="unseen_items"))
    a = evaluator.run(ratings, PopularityRecommender())
    b = evaluator.run(ratings, PopularityRecommender())
    assert [f.metrics for f in a.folds] == [f.metrics for f in b.folds]


def test_parallel_matches_sequential(ratings):
    sequential = CrossValidationEvaluator(_config(num_folds=3)).run(ratings, PopularityRecommender())
    parallel = CrossValidationEvaluator(_config(num_folds=3, max_workers=3)).run(
        ratings, PopularityRecommender(), show_progress=True
    )
    assert [f.index for f in parallel.folds] == [0, 1, 2]
    assert [f.metrics for f in parallel.folds] == [f.metrics for f in sequential.folds]


def test_popularity_reports_every_metric(ratings):
    result = CrossValidationEvaluator(_config()).run(ratings, PopularityRecommender())
    for fold in result.folds:
        assert set(fold.metrics) >= {"ndcg@1", "precision@3", "recall@3", "rmse", "mae"}


def test_recommender_failure_reports_fold(ratings):
    def broken(training, users):
        raise RuntimeError("model exploded")

    with pytest.raises(FoldError) as excinfo:
        CrossValidationEvaluator(_config()).run(ratings, broken)
    assert excinfo.value.fold_index == 0
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_scoring_failure_reports_fold(ratings, monkeypatch):
    def broken_metrics(recommended, test, config):
        raise TypeError("'<' not supported between instances of 'str' and 'int'")

    monkeypatch.setattr(runner, "compute_metrics", broken_metrics)
    with pytest.raises(FoldError, match="scoring failed") as excinfo:
        CrossValidationEvaluator(_config()).run(ratings, make_oracle(ratings))
    assert excinfo.value.fold_index == 0
    assert isinstance(excinfo.value.__cause__, TypeError)


def test_infinite_scores_do_not_abort_fold(train_test):
    training, test = train_test
    recommended = RatingStore.from_triples([
        (1, 20, 5.0), (1, 22, 3.0), (1, 21, float("-inf")),
    ])
    result = evaluate_fold(training, test, recommended, _config())
    assert result.metrics["rmse"] == pytest.approx(0.0)
    assert result.metrics["mae"] == pytest.approx(0.0)
    assert result.metrics["ndcg"] == pytest.approx(1 / 3)


def test_recommender_must_return_rating_store(ratings):
    with pytest.raises(FoldError, match="expected RatingStore"):
        CrossValidationEvaluator(_config()).run(ratings, lambda training, users: {})


def test_rejects_non_recommender(ratings):
    with pytest.raises(TypeError):
        CrossValidationEvaluator(_config()).run(ratings, 42)


def test_evaluate_fold_filters_before_scoring(train_test):
    training, test = train_test
    recommended = RatingStore.from_triples([
        (1, 20, 5.0), (1, 22, 3.0), (1, 21, 2.0),
        (1, 10, 9.0),   # training item, outside the user_test candidates
    ])
    result = evaluate_fold(training, test, recommended, _config(), index=4)
    assert result.index == 4
    assert result.num_recommended == 3
    assert result.metrics["precision@1"] == pytest.approx(1 / 3)   # users 2, 3 score 0
    assert result.metrics["rmse"] == pytest.approx(0.0)


def test_mean_skips_undefined_values():
    result = EvaluationResult(folds=[
        FoldResult(index=0, metrics={"ndcg@5": 0.2, "rmse": None}),
        FoldResult(index=1, metrics={"ndcg@5": 0.4, "rmse": 1.0}),
    ])
    assert result.mean() == {"ndcg@5": pytest.approx(0.3), "rmse": 1.0}

    all_undefined = EvaluationResult(folds=[FoldResult(index=0, metrics={"rmse": None})])
    assert all_undefined.mean() == {"rmse": None}


def test_to_dataframe():
    result = EvaluationResult(folds=[
        FoldResult(index=0, metrics={"ndcg@5": 0.2, "rmse": None}),
        FoldResult(index=1, metrics={"ndcg@5": 0.4, "rmse": 1.0}),
    ])
    df = result.to_dataframe()
    assert list(df.index) == ["fold_0", "fold_1", "mean"]
    assert list(df.columns) == ["ndcg@5", "rmse"]
    assert df.loc["mean", "ndcg@5"] == pytest.approx(0.3)
    assert math.isnan(df.loc["fold_0", "rmse"])
