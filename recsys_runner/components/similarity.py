"""
Built-in similarity measures.

Both compare sparse rating vectors (``id → rating``); which side of the
matrix is compared (users or items) comes from
``rec.recommender.similarity.key`` at build time.
"""

from __future__ import annotations

import math

from recsys_runner.components.base import RecommenderSimilarity
from recsys_runner.job.registry import register_component


@register_component("similarity", "cos")
class CosineSimilarity(RecommenderSimilarity):
    """Cosine of the angle between two rating vectors (over all entries)."""

    def compute(self, a: dict[str, float], b: dict[str, float]) -> float:
        if len(a) > len(b):
            a, b = b, a
        dot = sum(value * b[key] for key, value in a.items() if key in b)
        if dot == 0.0:
            return 0.0
        norm_a = math.sqrt(sum(v * v for v in a.values()))
        norm_b = math.sqrt(sum(v * v for v in b.values()))
        return dot / (norm_a * norm_b)


@register_component("similarity", "jaccard")
class JaccardSimilarity(RecommenderSimilarity):
    """|A ∩ B| / |A ∪ B| over the rated ids; rating values are ignored."""

    def compute(self, a: dict[str, float], b: dict[str, float]) -> float:
        common = len(a.keys() & b.keys())
        if common == 0:
            return 0.0
        return common / (len(a) + len(b) - common)
