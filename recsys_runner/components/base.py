"""
Capability contracts for pluggable job components.

The job orchestrator only ever talks to components through these five
abstract bases.  Concrete implementations are selected by configuration key
and constructed by ``recsys_runner.job.registry.ComponentResolver``:

  ================  ==========================  ===================
  capability        configuration key           constructor
  ================  ==========================  ===================
  DataModel         data.model.format           (conf, rng)
  Similarity        rec.similarity.class        (conf)
  Recommender       rec.recommender.class       (conf)
  Evaluator         rec.eval.class              ()
  Filter            rec.filter.class            ()
  ================  ==========================  ===================

Interaction data is kept as nested dicts, ``user_id → {item_id: rating}``,
which is all the built-in components need.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, Optional

from recsys_runner.errors import DomainError, UnknownSplitMode
from recsys_runner.models.recommendation import MeasureValue, RecommendedItem

if TYPE_CHECKING:
    from recsys_runner.job.configuration import Configuration
    from recsys_runner.job.context import RecommenderContext

RatingMatrix = dict[str, dict[str, float]]


class SplitMode(str, Enum):
    """Train/test partitioning strategy selected by ``data.model.splitter``."""

    KCV = "kcv"
    LOOCV = "loocv"
    GIVEN = "given"
    RATIO = "ratio"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SplitMode":
        """Return the mode for ``value``.

        Raises:
            UnknownSplitMode: If ``value`` is missing or not a known mode.
        """
        if value is not None:
            try:
                return cls(str(value).strip().lower())
            except ValueError:
                pass
        raise UnknownSplitMode(value)

    @property
    def is_cross_validation(self) -> bool:
        return self in (SplitMode.KCV, SplitMode.LOOCV)


# ── Data model ────────────────────────────────────────────────────────────────


class DataModel(ABC):
    """Builds the working train/test split.

    ``build_data_model()`` is called once per fold on the same instance; it
    must re-derive ``train_matrix``/``test_matrix`` for the split mode and
    fold index currently in the configuration.

    Attributes:
        conf:         Job configuration (read at build time, not just at init).
        rng:          Random source supplied by the job.
        train_matrix: ``user → {item: rating}`` training interactions.
        test_matrix:  ``user → {item: rating}`` held-out interactions.
    """

    def __init__(self, conf: "Configuration", rng: Optional[random.Random] = None) -> None:
        self.conf = conf
        self.rng = rng or random.Random()
        self.train_matrix: RatingMatrix = {}
        self.test_matrix: RatingMatrix = {}

    @abstractmethod
    def build_data_model(self) -> None:
        ...

    @property
    @abstractmethod
    def splitter_kind(self) -> Optional[SplitMode]:
        """Split mode of the active data splitter, ``None`` before the first build."""
        ...

    def item_ids(self) -> list[str]:
        """All item ids seen in training, in first-seen order."""
        seen: dict[str, None] = {}
        for items in self.train_matrix.values():
            for item_id in items:
                seen.setdefault(item_id, None)
        return list(seen)


# ── Similarity ────────────────────────────────────────────────────────────────


class RecommenderSimilarity(ABC):
    """Pairwise similarity between users or between items.

    The job sets ``rec.recommender.similarity.key`` (``"user"`` or ``"item"``)
    just before calling ``build_similarity_matrix``; the key selects which
    side of the rating matrix is compared.
    """

    def __init__(self, conf: "Configuration") -> None:
        self.conf = conf
        self.similarity_key: Optional[str] = None
        self.matrix: dict[str, dict[str, float]] = {}

    def build_similarity_matrix(self, data_model: DataModel) -> None:
        """Compute similarities for every pair that shares at least one rating."""
        key = (self.conf.get_str("rec.recommender.similarity.key", "user") or "user").lower()
        if key not in ("user", "item"):
            raise ValueError(f"rec.recommender.similarity.key must be 'user' or 'item', got '{key}'.")
        self.similarity_key = key

        vectors = _vectors(data_model.train_matrix, by=key)
        inverted = _vectors(data_model.train_matrix, by="item" if key == "user" else "user")

        matrix: dict[str, dict[str, float]] = {a: {} for a in vectors}
        for a, vec_a in vectors.items():
            candidates: set[str] = set()
            for other in vec_a:
                candidates.update(inverted[other])
            for b in candidates:
                if b == a or b in matrix[a]:
                    continue
                sim = self.compute(vec_a, vectors[b])
                if sim != 0.0:
                    matrix[a][b] = sim
                    matrix[b][a] = sim
        self.matrix = matrix

    @abstractmethod
    def compute(self, a: dict[str, float], b: dict[str, float]) -> float:
        ...

    def get_similarity(self, a: str, b: str) -> float:
        return self.matrix.get(a, {}).get(b, 0.0)

    def neighbors(self, a: str) -> dict[str, float]:
        return self.matrix.get(a, {})


def _vectors(train: RatingMatrix, by: str) -> RatingMatrix:
    if by == "user":
        return train
    by_item: RatingMatrix = {}
    for user_id, items in train.items():
        for item_id, rating in items.items():
            by_item.setdefault(item_id, {})[user_id] = rating
    return by_item


# ── Evaluation ────────────────────────────────────────────────────────────────


@dataclass
class EvalContext:
    """Everything an evaluator needs: held-out truth and produced output."""

    test_matrix: RatingMatrix
    recommended_list: list[RecommendedItem]
    by_user: dict[str, list[RecommendedItem]] = field(init=False)

    def __post_init__(self) -> None:
        by_user: dict[str, list[RecommendedItem]] = {}
        for rec in self.recommended_list:
            by_user.setdefault(rec.user_id, []).append(rec)
        self.by_user = by_user


class RecommenderEvaluator(ABC):
    """Scores a recommender's output against the test set.

    Constructed with no arguments; the recommender sets ``top_n`` before
    calling ``evaluate`` when it runs in ranking mode.
    """

    measure_name: ClassVar[str]
    is_ranking: ClassVar[bool] = True

    def __init__(self) -> None:
        self.top_n: int = 10

    @abstractmethod
    def evaluate(self, context: EvalContext) -> float:
        ...


# ── Recommender ───────────────────────────────────────────────────────────────


class Recommender(ABC):
    """Base for recommendation algorithms.

    ``recommend(context)`` trains on ``context.data_model.train_matrix`` and
    fills ``recommended_list``:

      ranking mode (``rec.recommender.isranking = true``):
        top ``rec.recommender.ranking.topn`` unseen items per test user,
        highest score first.
      rating mode:
        one prediction per held-out (user, item) pair, in test-set order.

    Subclasses implement ``train_model()`` and ``predict(user, item)``.
    """

    display_name: ClassVar[Optional[str]] = None

    def __init__(self, conf: "Configuration") -> None:
        self.conf = conf
        self.is_ranking = conf.get_bool("rec.recommender.isranking", False)
        self.top_n = conf.get_int("rec.recommender.ranking.topn", 10) or 10
        self.context: Optional["RecommenderContext"] = None
        self.data_model: Optional[DataModel] = None
        self.train_matrix: RatingMatrix = {}
        self.test_matrix: RatingMatrix = {}
        self.recommended_list: Optional[list[RecommendedItem]] = None

    def recommend(self, context: "RecommenderContext") -> None:
        self.context = context
        self.data_model = context.data_model
        self.train_matrix = context.data_model.train_matrix
        self.test_matrix = context.data_model.test_matrix
        self.setup()
        self.train_model()
        if self.is_ranking:
            self.recommended_list = self.recommend_rank()
        else:
            self.recommended_list = self.recommend_rating()

    def setup(self) -> None:
        """Hook for reading hyperparameters before training."""

    @abstractmethod
    def train_model(self) -> None:
        ...

    @abstractmethod
    def predict(self, user_id: str, item_id: str) -> float:
        ...

    def recommend_rating(self) -> list[RecommendedItem]:
        return [
            RecommendedItem(user_id, item_id, self.predict(user_id, item_id))
            for user_id, items in self.test_matrix.items()
            for item_id in items
        ]

    def recommend_rank(self) -> list[RecommendedItem]:
        if self.data_model is None:
            raise DomainError(
                f"{type(self).__name__}.recommend_rank() called before recommend(context)."
            )
        all_items = self.data_model.item_ids()
        output: list[RecommendedItem] = []
        for user_id in self.test_matrix:
            seen = self.train_matrix.get(user_id, {})
            scored = [
                (item_id, self.predict(user_id, item_id))
                for item_id in all_items
                if item_id not in seen
            ]
            scored.sort(key=lambda pair: (-pair[1], pair[0]))
            output.extend(
                RecommendedItem(user_id, item_id, score)
                for item_id, score in scored[: self.top_n]
            )
        return output

    def get_recommended_list(self) -> Optional[list[RecommendedItem]]:
        return self.recommended_list

    def eval_context(self) -> EvalContext:
        return EvalContext(self.test_matrix, list(self.recommended_list or []))

    def evaluate(self, evaluator: RecommenderEvaluator) -> float:
        """Score the produced list with one designated evaluator."""
        if self.is_ranking:
            evaluator.top_n = self.top_n
        return evaluator.evaluate(self.eval_context())

    def evaluate_map(self) -> dict[MeasureValue, float]:
        """Score the produced list with every default measure for this mode."""
        from recsys_runner.components.measures import default_evaluators

        context = self.eval_context()
        results: dict[MeasureValue, float] = {}
        for evaluator in default_evaluators(self.is_ranking):
            top_n = None
            if self.is_ranking:
                evaluator.top_n = self.top_n
                top_n = self.top_n
            results[MeasureValue(evaluator.measure_name, top_n)] = evaluator.evaluate(context)
        return results


# ── Filter ────────────────────────────────────────────────────────────────────


class RecommendedFilter(ABC):
    """Post-processes the recommendation list before it is written."""

    @abstractmethod
    def filter(self, recommended_list: list[RecommendedItem]) -> list[RecommendedItem]:
        ...
