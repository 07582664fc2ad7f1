"""
Built-in evaluation measures.

Ranking measures (averaged over test users that received recommendations):

  precision   hits in the top-N list / N
  recall      hits in the top-N list / number of held-out items
  hitrate     fraction of users with at least one hit in the top-N list

Rating measures (over every predicted held-out pair):

  mae         mean absolute error
  rmse        root mean squared error

All return 0.0 when there is nothing to evaluate.
"""

from __future__ import annotations

import math

from recsys_runner.components.base import EvalContext, RecommenderEvaluator
from recsys_runner.job.registry import register_component


class _RankingEvaluator(RecommenderEvaluator):
    is_ranking = True

    def _per_user(self, context: EvalContext):
        """Yield (top-N recommended item ids, held-out item ids) per test user."""
        for user_id, truth in context.test_matrix.items():
            recs = context.by_user.get(user_id)
            if not recs or not truth:
                continue
            ranked = sorted(recs, key=lambda r: -r.score)[: self.top_n]
            yield [r.item_id for r in ranked], truth.keys()

    def evaluate(self, context: EvalContext) -> float:
        scores = [self.score_user(recs, truth) for recs, truth in self._per_user(context)]
        return sum(scores) / len(scores) if scores else 0.0

    def score_user(self, recommended: list[str], truth) -> float:
        raise NotImplementedError


@register_component("evaluator", "precision")
class PrecisionEvaluator(_RankingEvaluator):
    measure_name = "precision"

    def score_user(self, recommended: list[str], truth) -> float:
        hits = sum(1 for item_id in recommended if item_id in truth)
        return hits / self.top_n


@register_component("evaluator", "recall")
class RecallEvaluator(_RankingEvaluator):
    measure_name = "recall"

    def score_user(self, recommended: list[str], truth) -> float:
        hits = sum(1 for item_id in recommended if item_id in truth)
        return hits / len(truth)


@register_component("evaluator", "hitrate")
class HitRateEvaluator(_RankingEvaluator):
    measure_name = "hitrate"

    def score_user(self, recommended: list[str], truth) -> float:
        return 1.0 if any(item_id in truth for item_id in recommended) else 0.0


class _RatingEvaluator(RecommenderEvaluator):
    is_ranking = False

    def _errors(self, context: EvalContext) -> list[float]:
        errors: list[float] = []
        for rec in context.recommended_list:
            actual = context.test_matrix.get(rec.user_id, {}).get(rec.item_id)
            if actual is not None:
                errors.append(rec.score - actual)
        return errors


@register_component("evaluator", "mae")
class MAEEvaluator(_RatingEvaluator):
    measure_name = "mae"

    def evaluate(self, context: EvalContext) -> float:
        errors = self._errors(context)
        return sum(abs(e) for e in errors) / len(errors) if errors else 0.0


@register_component("evaluator", "rmse")
class RMSEEvaluator(_RatingEvaluator):
    measure_name = "rmse"

    def evaluate(self, context: EvalContext) -> float:
        errors = self._errors(context)
        return math.sqrt(sum(e * e for e in errors) / len(errors)) if errors else 0.0


RANKING_EVALUATORS = (PrecisionEvaluator, RecallEvaluator, HitRateEvaluator)
RATING_EVALUATORS = (MAEEvaluator, RMSEEvaluator)


def default_evaluators(is_ranking: bool) -> list[RecommenderEvaluator]:
    """Fresh instances of every default measure for the given mode."""
    classes = RANKING_EVALUATORS if is_ranking else RATING_EVALUATORS
    return [cls() for cls in classes]
