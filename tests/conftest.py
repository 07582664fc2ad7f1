"""
Shared pytest fixtures for the recsys-runner test suite.

Provides:
  - ``fakes``: Recording stand-ins for every component kind, registered under
    short driver names for the duration of one test.  Each fake appends to
    ``fakes.events`` so tests can assert on call order.
  - ``make_conf``: Factory for a job ``Configuration`` wired to the fakes and
    writing results under ``tmp_path``.
  - ``ratings_file``: A small ratings file on disk for the text data model.
"""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, ClassVar, Optional

import pytest

from recsys_runner.components.base import (
    DataModel,
    RecommendedFilter,
    Recommender,
    RecommenderEvaluator,
    RecommenderSimilarity,
    SplitMode,
)
from recsys_runner.errors import DomainError
from recsys_runner.job.configuration import Configuration
from recsys_runner.job.registry import register_component, unregister_component
from recsys_runner.models.recommendation import MeasureValue, RecommendedItem

EVENTS: list[str] = []


# ── Fake components ───────────────────────────────────────────────────────────

class RecordingDataModel(DataModel):
    """Fixed two-user split; remembers the fold index seen at each build."""

    instances: ClassVar[list["RecordingDataModel"]] = []

    def __init__(self, conf, rng=None) -> None:
        super().__init__(conf, rng)
        self.build_calls: list[Optional[int]] = []
        self._mode: Optional[SplitMode] = None
        RecordingDataModel.instances.append(self)

    @property
    def splitter_kind(self) -> Optional[SplitMode]:
        return self._mode

    def build_data_model(self) -> None:
        EVENTS.append("data.build")
        self._mode = SplitMode.parse(self.conf.get_str("data.model.splitter"))
        self.build_calls.append(self.conf.get_int("data.splitter.cv.index"))
        self.train_matrix = {"u1": {"i1": 5.0, "i2": 3.0}, "u2": {"i1": 4.0, "i3": 2.0}}
        self.test_matrix = {"u1": {"i3": 4.0}, "u2": {"i2": 1.0}}


class BrokenBuildDataModel(RecordingDataModel):
    def build_data_model(self) -> None:
        raise ValueError("corrupt input")


class RecordingSimilarity(RecommenderSimilarity):
    def build_similarity_matrix(self, data_model: DataModel) -> None:
        self.similarity_key = self.conf.get_str("rec.recommender.similarity.key")
        EVENTS.append(f"similarity.build:{self.similarity_key}")

    def compute(self, a, b) -> float:
        return 0.0


class FixedListRecommender(Recommender):
    """Always recommends ``output``; reports ``measure_map`` when asked."""

    display_name = "Fixed"
    output: ClassVar[list[RecommendedItem]] = [
        RecommendedItem("u1", "i1", 0.9),
        RecommendedItem("u2", "i2", 0.5),
    ]
    measure_map: ClassVar[dict] = {
        MeasureValue("precision", 10): 0.5,
        MeasureValue("mae"): 0.7,
        None: 1.0,
    }
    last: ClassVar[Optional["FixedListRecommender"]] = None

    def __init__(self, conf) -> None:
        super().__init__(conf)
        FixedListRecommender.last = self

    def recommend(self, context) -> None:
        EVENTS.append("recommend")
        super().recommend(context)

    def train_model(self) -> None:
        pass

    def predict(self, user_id: str, item_id: str) -> float:
        return 0.0

    def recommend_rank(self) -> list[RecommendedItem]:
        return list(self.output)

    def recommend_rating(self) -> list[RecommendedItem]:
        return list(self.output)

    def get_recommended_list(self):
        EVENTS.append("get_list")
        return super().get_recommended_list()

    def evaluate(self, evaluator) -> float:
        EVENTS.append("evaluate")
        return super().evaluate(evaluator)

    def evaluate_map(self):
        EVENTS.append("evaluate")
        return dict(self.measure_map)


class EmptyRecommender(FixedListRecommender):
    display_name = "Empty"
    output: ClassVar[list[RecommendedItem]] = []


class FailOnFoldTwoRecommender(FixedListRecommender):
    display_name = "FailOnTwo"

    def train_model(self) -> None:
        if self.conf.get_int("data.splitter.cv.index") == 2:
            raise DomainError("model diverged on fold 2")


class BrokenConstructorRecommender(FixedListRecommender):
    def __init__(self, conf) -> None:
        raise RuntimeError("missing hyperparameter")


class ConstantEvaluator(RecommenderEvaluator):
    measure_name = "constant"

    def evaluate(self, context) -> float:
        EVENTS.append("evaluator")
        return 0.42


class ReverseFilter(RecommendedFilter):
    def filter(self, recommended_list):
        EVENTS.append("filter")
        return list(reversed(recommended_list))


_FAKE_DRIVERS = [
    ("data_model", "recording", RecordingDataModel),
    ("data_model", "brokenbuild", BrokenBuildDataModel),
    ("similarity", "recording", RecordingSimilarity),
    ("recommender", "fixed", FixedListRecommender),
    ("recommender", "empty", EmptyRecommender),
    ("recommender", "failontwo", FailOnFoldTwoRecommender),
    ("recommender", "brokenctor", BrokenConstructorRecommender),
    ("evaluator", "constant", ConstantEvaluator),
    ("filter", "reverse", ReverseFilter),
]


@pytest.fixture
def fakes():
    """Register the fake components and reset their recorded state."""
    EVENTS.clear()
    RecordingDataModel.instances.clear()
    FixedListRecommender.last = None
    for kind, name, cls in _FAKE_DRIVERS:
        register_component(kind, name)(cls)

    yield SimpleNamespace(
        events=EVENTS,
        RecordingDataModel=RecordingDataModel,
        RecordingSimilarity=RecordingSimilarity,
        FixedListRecommender=FixedListRecommender,
        ConstantEvaluator=ConstantEvaluator,
        ReverseFilter=ReverseFilter,
    )

    for kind, name, _ in _FAKE_DRIVERS:
        unregister_component(kind, name)


# ── Configuration factory ─────────────────────────────────────────────────────

@pytest.fixture
def make_conf(tmp_path: Path) -> Callable[..., Configuration]:
    """Return a factory building a Configuration wired to the fake components.

    Usage::

        conf = make_conf({"data.model.splitter": "kcv", "data.splitter.cv.number": 3})
    """

    def _make(overrides: Optional[dict[str, Any]] = None) -> Configuration:
        values: dict[str, Any] = {
            "dfs.result.dir": str(tmp_path / "out"),
            "data.input.path": "ml-100k",
            "data.model.format": "recording",
            "data.model.splitter": "given",
            "rec.recommender.class": "fixed",
        }
        values.update(overrides or {})
        return Configuration(values)

    return _make


# ── Data files ────────────────────────────────────────────────────────────────

SAMPLE_RATINGS = """\
user,item,rating
u1,i1,5
u1,i2,3
u1,i3,4
u2,i1,4
u2,i3,5
u2,i4,2
u3,i2,5
u3,i4,4
u4,i1,2
u4,i5,5
u5,i3,1
"""


@pytest.fixture
def ratings_file(tmp_path: Path) -> Path:
    """An 11-rating file with a header row; u5 has a single rating."""
    path = tmp_path / "data" / "ratings.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_RATINGS, encoding="utf-8")
    return path
