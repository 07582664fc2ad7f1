"""
Evaluator dispatch: one designated evaluator, or every default measure.

Gate: nothing happens unless ``rec.eval.enable`` is true.

Designated mode
  ``rec.eval.class`` resolves → construct it with no arguments and call
  ``recommender.evaluate(evaluator)``; one scalar is reported.

All-measures mode
  ``rec.eval.class`` is not set → ``recommender.evaluate_map()``; each entry
  with a non-null key is reported once, with its top-N cutoff when positive.

Reporting is read-only: the recommendation list is never touched and
persistence is never gated on the outcome.
"""

from __future__ import annotations

import logging
from typing import Optional

from recsys_runner.components.base import Recommender
from recsys_runner.job.configuration import Configuration
from recsys_runner.job.registry import ComponentResolver
from recsys_runner.models.run import EvaluationReport

logger = logging.getLogger(__name__)


class EvaluatorDispatcher:
    def __init__(self, conf: Configuration, resolver: ComponentResolver) -> None:
        self.conf = conf
        self.resolver = resolver

    def execute(self, recommender: Recommender) -> Optional[EvaluationReport]:
        """Run evaluation for ``recommender`` and log the results.

        Returns:
            The report, or ``None`` when evaluation is disabled.

        Raises:
            ComponentNotFound: ``rec.eval.class`` is set but unresolvable.
            ComponentConstructionError: The evaluator constructor raised.
        """
        if not self.conf.get_bool("rec.eval.enable", False):
            return None

        evaluator_cls = self.resolver.get_class("rec.eval.class", "evaluator")
        if evaluator_cls is not None:
            evaluator = self.resolver.create(evaluator_cls)
            value = recommender.evaluate(evaluator)
            name = type(evaluator).__name__
            logger.info("Evaluator info: %s is %s", name, value)
            return EvaluationReport(mode="designated", results={name: value})

        report = EvaluationReport(mode="all_measures")
        eval_map = recommender.evaluate_map() or {}
        for measure, value in eval_map.items():
            if measure is None:
                continue
            if measure.top_n is not None and measure.top_n > 0:
                logger.info("Evaluator value: %s top %d is %s", measure.measure, measure.top_n, value)
            else:
                logger.info("Evaluator value: %s is %s", measure.measure, value)
            report.results[measure.label()] = value
        return report
