"""
End-to-end jobs over the built-in components and a real ratings file.

No fakes here: text data model, cosine similarity, KNN / most-popular
recommenders, built-in measures and the generic filter all run together.
"""

from __future__ import annotations

import pytest

from recsys_runner.job.configuration import Configuration
from recsys_runner.job.runner import RecommenderJob


@pytest.fixture
def base_values(tmp_path, ratings_file):
    return {
        "dfs.data.dir": str(ratings_file.parent),
        "dfs.result.dir": str(tmp_path / "results"),
        "data.input.path": ratings_file.name,
        "data.model.format": "text",
    }


class TestEndToEnd:
    def test_itemknn_kcv_rating_mode(self, base_values, tmp_path, ratings_file):
        conf = Configuration({
            **base_values,
            "data.model.splitter": "kcv",
            "data.splitter.cv.number": 3,
            "rec.recommender.class": "itemknn",
            "rec.recommender.similarities": ["item"],
            "rec.similarity.class": "cos",
            "rec.eval.enable": True,
        })
        result = RecommenderJob(conf).run_job()

        assert result.status == "success"
        assert [f.fold_index for f in result.folds] == [1, 2, 3]
        total_predictions = 0
        for fold in result.folds:
            assert fold.evaluation.mode == "all_measures"
            assert set(fold.evaluation.results) == {"mae", "rmse"}
            lines = fold.output_path.read_text(encoding="utf-8").splitlines()
            assert len(lines) == fold.n_recommended
            total_predictions += len(lines)
        # every rating is held out exactly once across the folds
        assert total_predictions == 11

    def test_mostpopular_given_ranking_with_designated_evaluator(self, base_values, ratings_file):
        (ratings_file.parent / "test.csv").write_text("u1,i4,3\nu5,i1,4\n", encoding="utf-8")
        conf = Configuration({
            **base_values,
            "data.model.splitter": "given",
            "data.testset.path": "test.csv",
            "rec.recommender.class": "mostpopular",
            "rec.recommender.isranking": True,
            "rec.recommender.ranking.topn": 2,
            "rec.eval.enable": True,
            "rec.eval.class": "hitrate",
        })
        result = RecommenderJob(conf).run_job()

        fold = result.folds[0]
        assert fold.fold_index is None
        assert fold.output_path.name == "MostPopular"
        assert fold.evaluation.results == {"HitRateEvaluator": 1.0}
        lines = fold.output_path.read_text(encoding="utf-8").splitlines()
        # u1 has seen i1-i3: next most popular are i4 (2 ratings) and i5 (1 rating)
        assert lines[:2] == ["u1,i4,2.0", "u1,i5,1.0"]
        # u5 only rated i3: i1 (3 ratings) leads
        assert lines[2].startswith("u5,i1,")

    def test_loocv_userknn_with_filter(self, base_values):
        conf = Configuration({
            **base_values,
            "data.model.splitter": "loocv",
            "data.splitter.cv.number": 2,
            "rec.recommender.class": "userknn",
            "rec.recommender.similarities": "user",
            "rec.similarity.class": "jaccard",
            "rec.filter.class": "generic",
        })
        result = RecommenderJob(conf).run_job()

        assert [f.fold_index for f in result.folds] == [0, 1]
        assert [f.output_path.name for f in result.folds] == ["UserKNN-0", "UserKNN-1"]
        assert all(f.evaluation is None for f in result.folds)
        # four users have more than one rating, so four held-out pairs per fold
        assert all(f.n_recommended == 4 for f in result.folds)
