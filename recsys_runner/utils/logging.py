"""
Logging setup for recommender jobs.

``configure_logging(config)`` is called once by the CLI before a job starts.
Library modules only ever do ``logger = logging.getLogger(__name__)``.

Every record passing through the configured handlers is stamped with the id
of the job currently running (``-`` outside a job), so interleaved output
from a k-fold sweep can be traced back to its ``rec.job.id``::

    with job_log_context(job.job_id):
        ...

Text format::

    2026-10-19T14:30:05Z [INFO] job_20261019143005_3f9a1c2e recsys_runner.job.runner: ...

JSON format (``json_format = true`` under ``[logging]``), one object per line::

    {"ts": "...", "level": "INFO", "job_id": "job_...", "logger": "...", "msg": "..."}
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from recsys_runner.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(job_id)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
NO_JOB = "-"

# Attributes every LogRecord has; anything else came in through ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "job_id"}

_active_job: list[str] = []


@contextmanager
def job_log_context(job_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``job_id``.

    Contexts nest; the innermost job id wins.
    """
    _active_job.append(job_id)
    try:
        yield
    finally:
        _active_job.pop()


def current_job_id() -> str:
    return _active_job[-1] if _active_job else NO_JOB


class JobIdFilter(logging.Filter):
    """Adds ``record.job_id`` so formatters can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job_id = current_job_id()
        return True


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(LOG_DATE_FORMAT),
            "level": record.levelname,
            "job_id": getattr(record, "job_id", NO_JOB),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key, val in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                payload[key] = val
        return json.dumps(payload, default=str)


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(JobIdFilter())
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Installs a stdout handler, plus a UTF-8 file handler when
    ``config.log_file`` is set (parent directories are created).  Replaces
    any handlers already on the root logger.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    formatter: logging.Formatter
    if config.json_format:
        formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers = [_make_handler(logging.StreamHandler(sys.stdout), level, formatter)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _make_handler(logging.FileHandler(log_path, encoding="utf-8"), level, formatter)
        )

    logging.basicConfig(level=level, handlers=handlers, force=True)
