"""
Result types returned by the job controller and the fold pipeline.

These are plain records; nothing in the runner reads them back.  They exist
so the CLI (and tests) can report what each fold did without scraping logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional


@dataclass
class EvaluationReport:
    """What the evaluator dispatcher reported for one fold.

    Attributes:
        mode:    ``"designated"`` or ``"all_measures"``.
        results: Ordered label → score, e.g. ``{"precision@10": 0.12}`` or
                 ``{"PrecisionEvaluator": 0.12}``.
    """

    mode: str
    results: dict[str, float] = field(default_factory=dict)


@dataclass
class FoldResult:
    """Outcome of one single-fold pipeline execution.

    Attributes:
        fold_index:    Fold index (``None`` for given/ratio splits).
        algo_name:     Short display name of the recommender.
        n_recommended: Length of the list after filtering.
        evaluation:    Evaluation report, ``None`` when evaluation is disabled.
        output_path:   Path written (or attempted); ``None`` when the list was empty.
        written:       True if the output file was written.
        write_error:   Error message if persisting failed.
    """

    fold_index:    Optional[int]
    algo_name:     str
    n_recommended: int = 0
    evaluation:    Optional[EvaluationReport] = None
    output_path:   Optional[Path] = None
    written:       bool = False
    write_error:   Optional[str] = None


@dataclass
class JobResult:
    """Complete result of one ``RecommenderJob.run_job()`` call.

    Attributes:
        job_id:          Value of ``rec.job.id``.
        split_mode:      Split mode the controller ran.
        folds:           One ``FoldResult`` per executed fold, in order.
        started_at:      UTC datetime when the job started.
        finished_at:     UTC datetime when the job finished.
        config_snapshot: Configuration at job start.
        status:          ``"success"`` when every fold persisted its output,
                         ``"partial"`` when any write failed.
    """

    job_id:          str
    split_mode:      str
    folds:           list[FoldResult] = field(default_factory=list)
    started_at:      Optional[datetime] = None
    finished_at:     Optional[datetime] = None
    config_snapshot: dict[str, Any] = field(default_factory=dict)
    status:          str = "started"

    @property
    def write_errors(self) -> list[str]:
        return [f.write_error for f in self.folds if f.write_error]
