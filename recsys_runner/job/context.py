"""
Per-fold execution context.

``FoldRun`` is the immutable description of which fold is executing; the
controller builds one per fold and hands it down by parameter.

``RecommenderContext`` is created fresh at the start of every fold and
discarded after it.  It carries the configuration, the (job-lifetime) data
model and the similarities built for this fold.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from recsys_runner.components.base import DataModel, RecommenderSimilarity, SplitMode
from recsys_runner.job.configuration import Configuration


@dataclass(frozen=True)
class FoldRun:
    """Which split and fold a single pipeline execution belongs to.

    Attributes:
        split_mode: Split mode the controller is running.
        fold_index: 1..N for kcv, 0..N-1 for loocv, ``None`` for given/ratio.
    """

    split_mode: SplitMode
    fold_index: Optional[int] = None

    @property
    def label(self) -> str:
        if self.fold_index is None:
            return self.split_mode.value
        return f"{self.split_mode.value}[{self.fold_index}]"


class RecommenderContext:
    """Configuration, data model and similarities for one fold.

    ``similarity`` is the primary similarity: the first one added, for
    recommenders that only take a single matrix.  ``similarities`` keeps every
    built similarity by key in insertion order.
    """

    def __init__(
        self,
        conf: Configuration,
        data_model: DataModel,
        fold: Optional[FoldRun] = None,
    ) -> None:
        self.conf = conf
        self.data_model = data_model
        self.fold = fold
        self.similarity: Optional[RecommenderSimilarity] = None
        self.similarities: dict[str, RecommenderSimilarity] = {}

    def set_similarity(self, similarity: RecommenderSimilarity) -> None:
        self.similarity = similarity

    def add_similarity(self, key: str, similarity: RecommenderSimilarity) -> None:
        if self.similarity is None:
            self.similarity = similarity
        self.similarities[key] = similarity

    def get_similarity(self, key: Optional[str] = None) -> Optional[RecommenderSimilarity]:
        """Similarity registered under ``key``, or the primary one if ``key`` is None."""
        if key is None:
            return self.similarity
        return self.similarities.get(key)
