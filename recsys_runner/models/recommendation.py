"""
Recommendation output and measure keys.

``RecommendedItem`` is what a recommender produces and the result writer
persists.  ``MeasureValue`` keys the full measure map returned by
``Recommender.evaluate_map()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RecommendedItem:
    """One scored (user, item) pair.

    Attributes:
        user_id: Raw user identifier as read from the input data.
        item_id: Raw item identifier as read from the input data.
        score:   Predicted rating (rating mode) or ranking score (ranking mode).
    """

    user_id: str
    item_id: str
    score: float

    def to_line(self) -> str:
        """Render as ``user,item,score`` (no trailing newline)."""
        return f"{self.user_id},{self.item_id},{float(self.score)!r}"


@dataclass(frozen=True)
class MeasureValue:
    """Identifies one evaluation metric, optionally at a top-N cutoff.

    Two keys are equal when both the measure name and the cutoff match, so a
    measure map holds at most one score per (measure, top_n).

    Attributes:
        measure: Measure name, e.g. ``"precision"`` or ``"mae"``.
        top_n:   Ranking cutoff; ``None`` for rating measures.
    """

    measure: str
    top_n: Optional[int] = None

    def label(self) -> str:
        if self.top_n is not None and self.top_n > 0:
            return f"{self.measure}@{self.top_n}"
        return self.measure
