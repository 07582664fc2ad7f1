"""
recsys_runner.models — plain record types shared across the runner.

Modules:
  recommendation — RecommendedItem, MeasureValue.
  run            — EvaluationReport, FoldResult, JobResult.
"""

from recsys_runner.models.recommendation import MeasureValue, RecommendedItem
from recsys_runner.models.run import EvaluationReport, FoldResult, JobResult

__all__ = [
    "EvaluationReport",
    "FoldResult",
    "JobResult",
    "MeasureValue",
    "RecommendedItem",
]
