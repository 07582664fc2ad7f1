"""Time helpers and job identifiers."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


def generate_job_id(now: datetime | None = None) -> str:
    """Return a new unique job identifier.

    Format: ``job_<YYYYmmddHHMMSS>_<8 hex chars>``, e.g.
    ``job_20261019143005_3f9a1c2e``.  The timestamp prefix keeps ids sortable
    by start time; the random suffix keeps them unique within one second.
    """
    stamp = (now or utcnow()).strftime("%Y%m%d%H%M%S")
    return f"job_{stamp}_{uuid4().hex[:8]}"
