"""Built-in result filters."""

from __future__ import annotations

from typing import Iterable, Optional

from recsys_runner.components.base import RecommendedFilter
from recsys_runner.job.registry import register_component
from recsys_runner.models.recommendation import RecommendedItem


@register_component("filter", "generic")
class GenericRecommendedFilter(RecommendedFilter):
    """Keep only recommendations for allowed users and/or items.

    Constructed with no arguments (as the job does) both allow-lists are
    empty and the list passes through unchanged.  Subclass and set
    ``user_ids`` / ``item_ids`` to restrict output.
    """

    def __init__(
        self,
        user_ids: Optional[Iterable[str]] = None,
        item_ids: Optional[Iterable[str]] = None,
    ) -> None:
        self.user_ids = set(user_ids or ())
        self.item_ids = set(item_ids or ())

    def filter(self, recommended_list: list[RecommendedItem]) -> list[RecommendedItem]:
        if not self.user_ids and not self.item_ids:
            return recommended_list
        return [
            rec for rec in recommended_list
            if (not self.user_ids or rec.user_id in self.user_ids)
            and (not self.item_ids or rec.item_id in self.item_ids)
        ]
