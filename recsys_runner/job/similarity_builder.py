"""
Builds the fold's similarity matrices and registers them on the context.

``rec.recommender.similarities`` lists similarity keys in order (for the
built-in similarities, ``user`` and/or ``item``).  For each key a new
instance of ``rec.similarity.class`` is constructed, the key is written to
``rec.recommender.similarity.key`` and the matrix is built against the
current data model.  The first matrix built becomes the context's primary
similarity.
"""

from __future__ import annotations

import logging

from recsys_runner.errors import BuildFailure, ComponentNotFound, RecJobError
from recsys_runner.job.configuration import Configuration
from recsys_runner.job.context import RecommenderContext
from recsys_runner.job.registry import ComponentResolver

logger = logging.getLogger(__name__)

SIMILARITY_KEY = "rec.recommender.similarity.key"


def build_similarities(
    conf: Configuration,
    resolver: ComponentResolver,
    context: RecommenderContext,
) -> int:
    """Build every configured similarity into ``context``.

    Returns:
        Number of similarities registered (0 when the list is empty or the
        similarity class does not resolve).

    Raises:
        ComponentConstructionError: The similarity constructor raised.
        BuildFailure: ``build_similarity_matrix`` raised a non-job error.
    """
    keys = conf.get_strings("rec.recommender.similarities")
    if not keys:
        return 0

    try:
        cls = resolver.get_class("rec.similarity.class", "similarity")
    except ComponentNotFound as exc:
        logger.warning("Similarity class not resolved, building none: %s", exc)
        return 0
    if cls is None:
        logger.warning(
            "rec.recommender.similarities=%s but rec.similarity.class is not set; building none.",
            keys,
        )
        return 0

    for key in keys:
        similarity = resolver.create(cls, conf)
        conf.set(SIMILARITY_KEY, key)
        try:
            similarity.build_similarity_matrix(context.data_model)
        except RecJobError:
            raise
        except Exception as exc:
            raise BuildFailure(f"{cls.__name__} build for key '{key}' failed: {exc}") from exc
        context.add_similarity(key, similarity)
        logger.info("Similarity built | class=%s | key=%s", cls.__name__, key)

    return len(keys)
