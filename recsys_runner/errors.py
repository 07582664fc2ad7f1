"""
Exception taxonomy for recommender jobs.

Every failure the runner raises derives from ``RecJobError`` so callers (the
CLI in particular) can catch one type and exit cleanly.

Propagation policy
------------------
- ``ComponentNotFound``, ``ComponentConstructionError``, ``BuildFailure``,
  ``UnknownSplitMode`` and ``DomainError`` are fatal: they abort the whole job,
  not just the current fold.  There is no retry and no skip-and-continue.
- ``ResultWriteError`` is the one soft failure.  The result writer reports it
  on the fold result and only raises it when ``rec.output.fail.on.error`` is
  enabled.
"""

from __future__ import annotations


class RecJobError(Exception):
    """Base class for all recommender-job failures."""


class ConfigurationError(RecJobError):
    """A configuration value is missing or cannot be coerced to its type."""


class ComponentNotFound(RecJobError):
    """A configured component identifier cannot be located."""

    def __init__(self, identifier: str, kind: str, reason: str | None = None) -> None:
        self.identifier = identifier
        self.kind = kind
        msg = f"Cannot resolve {kind} component '{identifier}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ComponentConstructionError(RecJobError):
    """A resolved component class raised while being instantiated."""


class BuildFailure(RecJobError):
    """A data model or similarity matrix build raised."""


class DomainError(RecJobError):
    """Domain-specific failure raised by a pluggable component."""


class ResultWriteError(RecJobError):
    """Persisting the recommendation list failed."""


class UnknownSplitMode(RecJobError):
    """``data.model.splitter`` names a mode the controller does not know."""

    def __init__(self, mode: str | None) -> None:
        self.mode = mode
        super().__init__(
            f"Unknown split mode {mode!r}. Expected one of: kcv, loocv, given, ratio."
        )


# Names used by the error taxonomy in the design notes.
ClassResolutionError = ComponentNotFound
ConstructionError = ComponentConstructionError
IOFailure = ResultWriteError
