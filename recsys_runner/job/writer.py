"""
Result writer: deterministic output path and CSV-style serialization.

Output layout::

    {dfs.result.dir}/{data.input.path}-{algo}-output/{algo}[-{fold}]

where ``algo`` is the recommender's short display name and the ``-{fold}``
suffix is only added for k-fold / leave-one-out splitters when a fold index
is present.  The file holds one ``user,item,score`` line per recommended
item, in list order, with no header.

Scores are written with Python's ``repr(float)``: ``0.5``, ``1e-05``, ``nan``,
``inf``.  Readers expecting Java-style ``1.0E-5``, ``NaN`` or ``Infinity``
must accept the Python spelling; ordinary scores such as ``4.0`` or ``0.9``
look the same either way.

Write failures are logged with a traceback and reported on the fold result.
They are raised as ``ResultWriteError`` only when ``rec.output.fail.on.error``
is true.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from recsys_runner.components.base import DataModel
from recsys_runner.errors import ResultWriteError
from recsys_runner.job.configuration import Configuration
from recsys_runner.job.context import FoldRun
from recsys_runner.job.registry import driver_name
from recsys_runner.models.recommendation import RecommendedItem
from recsys_runner.models.run import FoldResult
from recsys_runner.utils.fileio import write_string

logger = logging.getLogger(__name__)


def build_output_path(
    conf: Configuration,
    algo_name: str,
    data_model: Optional[DataModel] = None,
    fold_index: Optional[int] = None,
) -> str:
    """Return ``{result_dir}/{input}-{algo}-output/{algo}[-{fold}]``."""
    result_dir = conf.get_str("dfs.result.dir", "") or ""
    input_path = conf.get_str("data.input.path", "") or ""
    output_path = f"{result_dir}/{input_path}-{algo_name}-output/{algo_name}"

    kind = data_model.splitter_kind if data_model is not None else None
    if kind is not None and kind.is_cross_validation and fold_index is not None:
        output_path = f"{output_path}-{fold_index}"
    return output_path


def serialize_recommendations(recommended_list: list[RecommendedItem]) -> str:
    """Render ``user,item,score\\n`` lines in list order."""
    return "".join(f"{item.to_line()}\n" for item in recommended_list)


class ResultWriter:
    def __init__(self, conf: Configuration) -> None:
        self.conf = conf

    def save_result(
        self,
        recommended_list: Optional[list[RecommendedItem]],
        recommender_cls: type,
        data_model: Optional[DataModel],
        fold: Optional[FoldRun],
        fold_result: Optional[FoldResult] = None,
    ) -> Optional[Path]:
        """Persist ``recommended_list``.

        Returns:
            The written path, or ``None`` if the list was empty or the write
            failed (in which case ``fold_result.write_error`` is set).

        Raises:
            ResultWriteError: Write failed and ``rec.output.fail.on.error`` is true.
        """
        if not recommended_list:
            logger.info("Recommendation list is empty; nothing to save.")
            return None

        algo_name = driver_name(recommender_cls)
        fold_index = fold.fold_index if fold is not None else None
        output_path = build_output_path(self.conf, algo_name, data_model, fold_index)
        logger.info("Result path is %s", output_path)
        if fold_result is not None:
            fold_result.output_path = Path(output_path)

        result_data = serialize_recommendations(recommended_list)
        try:
            written = write_string(output_path, result_data)
        except OSError as exc:
            logger.exception("Failed to save result to %s", output_path)
            if self.conf.get_bool("rec.output.fail.on.error", False):
                raise ResultWriteError(f"Cannot write {output_path}: {exc}") from exc
            if fold_result is not None:
                fold_result.write_error = f"{output_path}: {exc}"
            return None

        if fold_result is not None:
            fold_result.written = True
        return written
