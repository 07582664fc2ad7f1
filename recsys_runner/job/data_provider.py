"""
Data model provider: one DataModel instance per job, rebuilt every fold.

The first ``ensure_built`` call resolves ``data.model.format`` and constructs
the data model with the job configuration and random source.  Every call,
including the first, invokes ``build_data_model()`` so the instance
re-derives its split for the fold index now in the configuration.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from recsys_runner.components.base import DataModel
from recsys_runner.errors import BuildFailure, RecJobError
from recsys_runner.job.configuration import Configuration
from recsys_runner.job.registry import ComponentResolver

logger = logging.getLogger(__name__)


class DataModelProvider:
    """Owns the job's DataModel.

    Args:
        rng: Random source passed to the DataModel constructor.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng
        self.data_model: Optional[DataModel] = None
        self.build_count = 0

    def ensure_built(self, conf: Configuration) -> DataModel:
        """Construct the DataModel on first use, then (re)build it.

        Raises:
            ComponentNotFound: ``data.model.format`` missing or unresolvable.
            ComponentConstructionError: The DataModel constructor raised.
            BuildFailure: ``build_data_model()`` raised a non-job error.
        """
        if self.data_model is None:
            resolver = ComponentResolver(conf)
            cls = resolver.get_class("data.model.format", "data_model", required=True)
            self.data_model = resolver.create(cls, conf, self.rng)
            logger.info("Data model: %s", type(self.data_model).__name__)

        try:
            self.data_model.build_data_model()
        except RecJobError:
            raise
        except Exception as exc:
            raise BuildFailure(
                f"{type(self.data_model).__name__}.build_data_model() failed: {exc}"
            ) from exc

        self.build_count += 1
        logger.debug(
            "Data model built | build=%d | train_users=%d | test_users=%d",
            self.build_count,
            len(getattr(self.data_model, "train_matrix", None) or {}),
            len(getattr(self.data_model, "test_matrix", None) or {}),
        )
        return self.data_model
