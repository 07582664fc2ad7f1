"""recsys_runner — recommender-algorithm experiment runner."""

__version__ = "0.1.0"
