"""
Recommender job: the cross-validation controller.

``RecommenderJob.run_job()`` reads ``data.model.splitter`` once and repeats
the single-fold pipeline accordingly:

  kcv     folds 1..N      (N = data.splitter.cv.number, default 1)
  loocv   folds 0..N-1
  given   one run, no fold index
  ratio   one run, no fold index

Before each cross-validation fold the fold index is written to
``data.splitter.cv.index`` (data models read it from there) and an immutable
``FoldRun`` is passed to the pipeline.  Folds run sequentially; the first
failing fold aborts the job.  An unknown split mode raises
``UnknownSplitMode`` before anything runs, and a kcv/loocv fold count below 1
raises ``ConfigurationError``.

Random source
-------------
``data.splitter.random.uniform`` is read once at construction:
  true   → unseeded ``random.Random()``
  false  → ``random.Random(rec.random.seed)`` (default seed 1), reproducible
The instance is handed to the DataModel; no global generator is touched.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Union

from recsys_runner.components.base import Recommender, SplitMode
from recsys_runner.errors import ConfigurationError
from recsys_runner.job.configuration import Configuration
from recsys_runner.job.context import FoldRun
from recsys_runner.job.data_provider import DataModelProvider
from recsys_runner.job.pipeline import SingleFoldPipeline
from recsys_runner.models.run import JobResult
from recsys_runner.utils.logging import job_log_context
from recsys_runner.utils.time_utils import generate_job_id, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SEED = 1


class RecommenderJob:
    """Drives one experiment (or a cross-validation sweep) end to end.

    Args:
        conf: Job configuration.  ``rec.job.id`` is set on it at construction.
    """

    def __init__(self, conf: Configuration) -> None:
        self.conf = conf
        self.rng = self._make_random_source(conf)
        self.data_provider = DataModelProvider(rng=self.rng)
        self.job_id = generate_job_id()
        conf.set("rec.job.id", self.job_id)

    @staticmethod
    def _make_random_source(conf: Configuration) -> random.Random:
        if conf.get_bool("data.splitter.random.uniform", False):
            return random.Random()
        return random.Random(conf.get_int("rec.random.seed", DEFAULT_SEED))

    @property
    def data_model(self):
        return self.data_provider.data_model

    def set_recommender_class(self, recommender: Union[str, type]) -> None:
        """Set ``rec.recommender.class`` from a driver name, dotted path or class."""
        if isinstance(recommender, type):
            if not issubclass(recommender, Recommender):
                raise TypeError(f"{recommender.__name__} is not a Recommender subclass.")
            recommender = f"{recommender.__module__}.{recommender.__qualname__}"
        self.conf.set("rec.recommender.class", recommender)

    def fold_plan(self) -> list[FoldRun]:
        """Folds to execute, in order.

        Raises:
            UnknownSplitMode: ``data.model.splitter`` is missing or unknown.
            ConfigurationError: ``data.splitter.cv.number`` is below 1 for a
                cross-validation splitter.
        """
        mode = SplitMode.parse(self.conf.get_str("data.model.splitter"))
        if mode is SplitMode.KCV:
            n = self._cv_number()
            return [FoldRun(mode, i) for i in range(1, n + 1)]
        if mode is SplitMode.LOOCV:
            n = self._cv_number()
            return [FoldRun(mode, i) for i in range(n)]
        return [FoldRun(mode)]

    def _cv_number(self) -> int:
        n = self.conf.get_int("data.splitter.cv.number", 1)
        if n is None or n < 1:
            raise ConfigurationError(f"data.splitter.cv.number must be at least 1, got {n!r}.")
        return n

    def run_job(self) -> JobResult:
        """Run every planned fold sequentially.

        Returns:
            ``JobResult`` with one ``FoldResult`` per fold.

        Raises:
            UnknownSplitMode: Unknown split mode (nothing is executed).
            ConfigurationError: Fold count below 1 (nothing is executed).
            RecJobError: Any fatal failure inside a fold.
        """
        mode = SplitMode.parse(self.conf.get_str("data.model.splitter"))
        folds = self.fold_plan()
        result = JobResult(
            job_id=self.job_id,
            split_mode=mode.value,
            started_at=utcnow(),
            config_snapshot=self.conf.snapshot(),
        )
        logger.info("RecommenderJob | job_id=%s | splitter=%s | folds=%d", self.job_id, mode.value, len(folds))

        pipeline = SingleFoldPipeline(self.conf, self.data_provider)
        with job_log_context(self.job_id):
            for fold in folds:
                if fold.fold_index is not None:
                    logger.info(
                        "Splitter info: the index of %s splitter times is %d",
                        mode.value, fold.fold_index,
                    )
                    self.conf.set("data.splitter.cv.index", fold.fold_index)
                result.folds.append(pipeline.execute(fold))

        result.finished_at = utcnow()
        result.status = "partial" if result.write_errors else "success"
        logger.info(
            "RecommenderJob complete | job_id=%s | status=%s | folds=%d",
            self.job_id, result.status, len(result.folds),
        )
        return result
