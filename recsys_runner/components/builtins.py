"""Import every built-in component module so ``@register_component`` runs."""

from recsys_runner.components import data, filters, measures, recommenders, similarity

__all__ = ["data", "filters", "measures", "recommenders", "similarity"]
