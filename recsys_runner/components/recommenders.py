"""
Built-in recommenders.

MostPopularRecommender → "Users want what everyone else has."
                         Non-personalized baseline; every user gets the
                         most frequently rated unseen items.

ItemKNNRecommender     → "Users like items similar to items they already rated."
                         Scores (user, item) from the k most similar items the
                         user has rated.  Needs an ``item`` similarity.

UserKNNRecommender     → "Users like what similar users liked."
                         Scores (user, item) from the k most similar users who
                         rated the item.  Needs a ``user`` similarity.

Neighborhood size: ``rec.neighbors.knn.number`` (default 50).

In rating mode the KNN models predict a similarity-weighted average of the
neighbors' ratings, falling back to the global mean when no neighbor applies.
In ranking mode they score by summed neighbor similarity.
"""

from __future__ import annotations

from collections import Counter

from recsys_runner.components.base import Recommender, RecommenderSimilarity
from recsys_runner.errors import DomainError
from recsys_runner.job.registry import register_component


@register_component("recommender", "mostpopular")
class MostPopularRecommender(Recommender):
    """Score = number of training ratings the item received."""

    display_name = "MostPopular"

    def train_model(self) -> None:
        counts: Counter[str] = Counter()
        for items in self.train_matrix.values():
            counts.update(items.keys())
        self._popularity = counts

    def predict(self, user_id: str, item_id: str) -> float:
        return float(self._popularity.get(item_id, 0))


class _KNNRecommender(Recommender):
    """Shared neighborhood logic; subclasses pick the similarity side."""

    similarity_key: str

    def setup(self) -> None:
        self.knn = self.conf.get_int("rec.neighbors.knn.number", 50) or 50
        similarity = None
        if self.context is not None:
            similarity = self.context.get_similarity(self.similarity_key) or self.context.get_similarity()
        if similarity is None:
            raise DomainError(
                f"{type(self).__name__} needs a '{self.similarity_key}' similarity: set "
                f"rec.similarity.class and include '{self.similarity_key}' in "
                "rec.recommender.similarities."
            )
        self.similarity: RecommenderSimilarity = similarity

    def train_model(self) -> None:
        values = [r for items in self.train_matrix.values() for r in items.values()]
        self.global_mean = sum(values) / len(values) if values else 0.0
        self._neighbors: dict[str, dict[str, float]] = {}

    def _top_neighbors(self, key: str) -> dict[str, float]:
        cached = self._neighbors.get(key)
        if cached is None:
            ranked = sorted(self.similarity.neighbors(key).items(), key=lambda kv: (-kv[1], kv[0]))
            cached = dict(ranked[: self.knn])
            self._neighbors[key] = cached
        return cached

    def _aggregate(self, pairs: list[tuple[float, float]]) -> float:
        """Combine (similarity, rating) pairs from applicable neighbors."""
        if not pairs:
            return 0.0 if self.is_ranking else self.global_mean
        if self.is_ranking:
            return sum(sim for sim, _ in pairs)
        denom = sum(abs(sim) for sim, _ in pairs)
        if denom == 0.0:
            return self.global_mean
        return sum(sim * rating for sim, rating in pairs) / denom


@register_component("recommender", "itemknn")
class ItemKNNRecommender(_KNNRecommender):
    display_name = "ItemKNN"
    similarity_key = "item"

    def predict(self, user_id: str, item_id: str) -> float:
        rated = self.train_matrix.get(user_id, {})
        pairs = [
            (sim, rated[other])
            for other, sim in self._top_neighbors(item_id).items()
            if other in rated
        ]
        return self._aggregate(pairs)


@register_component("recommender", "userknn")
class UserKNNRecommender(_KNNRecommender):
    display_name = "UserKNN"
    similarity_key = "user"

    def predict(self, user_id: str, item_id: str) -> float:
        pairs = []
        for other, sim in self._top_neighbors(user_id).items():
            rating = self.train_matrix.get(other, {}).get(item_id)
            if rating is not None:
                pairs.append((sim, rating))
        return self._aggregate(pairs)
