"""
Single-fold pipeline.

Fixed sequence, run once per fold.  Each numbered step below is one
``[n/6]`` progress log line:

  Step 1 — Data:         Ensure the job's DataModel is built for this fold,
                         then open a fresh RecommenderContext(conf, data_model).
  Step 2 — Similarities: Build configured similarities into the context.
  Step 3 — Recommend:    Resolve rec.recommender.class, construct it with conf,
                         call recommend(context), collect get_recommended_list().
  Step 4 — Evaluate:     EvaluatorDispatcher (reporting only).
  Step 5 — Filter:       Optional rec.filter.class transformation.
  Step 6 — Persist:      ResultWriter.save_result().

Failure policy
--------------
Every step except persistence is fatal: the exception is logged with the
fold label and re-raised, aborting the job.  Nothing is cached across folds
except the DataModel instance held by the ``DataModelProvider``.
"""

from __future__ import annotations

import logging
from typing import Optional

from recsys_runner.components.base import Recommender
from recsys_runner.job.configuration import Configuration
from recsys_runner.job.context import FoldRun, RecommenderContext
from recsys_runner.job.data_provider import DataModelProvider
from recsys_runner.job.evaluation import EvaluatorDispatcher
from recsys_runner.job.registry import ComponentResolver, driver_name
from recsys_runner.job.similarity_builder import build_similarities
from recsys_runner.job.writer import ResultWriter
from recsys_runner.models.recommendation import RecommendedItem
from recsys_runner.models.run import FoldResult

logger = logging.getLogger(__name__)


def filter_result(
    resolver: ComponentResolver,
    recommended_list: Optional[list[RecommendedItem]],
) -> Optional[list[RecommendedItem]]:
    """Pass the list through ``rec.filter.class`` if one is configured.

    Without a filter the same list object is returned unchanged.

    Raises:
        ComponentNotFound: ``rec.filter.class`` is set but unresolvable.
        ComponentConstructionError: The filter constructor raised.
    """
    filter_cls = resolver.get_class("rec.filter.class", "filter")
    if filter_cls is None:
        return recommended_list
    result_filter = resolver.create(filter_cls)
    filtered = result_filter.filter(recommended_list)
    logger.info(
        "Filter %s | before=%d | after=%d",
        filter_cls.__name__, len(recommended_list or []), len(filtered or []),
    )
    return filtered


class SingleFoldPipeline:
    """Runs the six-step sequence for one fold.

    Args:
        conf:          Job configuration (shared across folds).
        data_provider: Job-lifetime DataModel owner.
    """

    def __init__(self, conf: Configuration, data_provider: DataModelProvider) -> None:
        self.conf = conf
        self.data_provider = data_provider

    def execute(self, fold: FoldRun) -> FoldResult:
        """Execute every step for ``fold``.

        Raises:
            RecJobError: Any component resolution, construction or build
                failure, or a ``DomainError`` raised by a component.
            Exception: Anything else a component raises propagates unchanged.
        """
        try:
            return self._execute(fold)
        except Exception as exc:
            logger.error("Fold %s FAILED: %s: %s", fold.label, type(exc).__name__, exc)
            raise

    def _execute(self, fold: FoldRun) -> FoldResult:
        conf = self.conf
        resolver = ComponentResolver(conf)

        logger.info("[1/6] Fold %s: building data model ...", fold.label)
        data_model = self.data_provider.ensure_built(conf)
        context = RecommenderContext(conf, data_model, fold)

        logger.info("[2/6] Fold %s: building similarities ...", fold.label)
        build_similarities(conf, resolver, context)

        recommender_cls = resolver.get_class("rec.recommender.class", "recommender", required=True)
        recommender: Recommender = resolver.create(recommender_cls, conf)
        algo_name = driver_name(recommender_cls)

        logger.info("[3/6] Fold %s: running %s ...", fold.label, algo_name)
        recommender.recommend(context)
        recommended_list = recommender.get_recommended_list()

        result = FoldResult(fold_index=fold.fold_index, algo_name=algo_name)

        logger.info("[4/6] Fold %s: evaluating ...", fold.label)
        result.evaluation = EvaluatorDispatcher(conf, resolver).execute(recommender)

        logger.info("[5/6] Fold %s: filtering ...", fold.label)
        recommended_list = filter_result(resolver, recommended_list)
        result.n_recommended = len(recommended_list or [])

        logger.info("[6/6] Fold %s: saving %d recommendations ...", fold.label, result.n_recommended)
        ResultWriter(conf).save_result(
            recommended_list, recommender_cls, data_model, fold, fold_result=result
        )
        return result
