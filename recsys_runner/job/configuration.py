"""
Job configuration: a flat, dotted-key property store.

Every pipeline component reads its settings from a ``Configuration`` by key
(``data.model.format``, ``rec.recommender.class``, ...).  Values arrive either
typed (from TOML) or as strings (from ``-D key=value`` CLI overrides), so the
typed getters accept both.

The controller is the only writer during a job: it injects the current fold
index (``data.splitter.cv.index``) before each fold, and the similarity
builder sets ``rec.recommender.similarity.key`` before each matrix build.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Optional

from recsys_runner.errors import ConfigurationError

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})


class Configuration:
    """Mutable key → value store shared by the controller and pipeline stages.

    Args:
        values: Initial properties.  Keys are dotted strings; values may be
            str, int, float, bool or a list of strings.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    # ── Raw access ────────────────────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def unset(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._values.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of all properties (for run records)."""
        return dict(self._values)

    # ── Typed getters ─────────────────────────────────────────────────────────

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key)
        if value is None:
            return default
        text = str(value).strip()
        return text if text else default

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        value = self.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        if isinstance(value, bool):
            raise ConfigurationError(f"{key} must be an integer, got bool {value!r}.")
        try:
            return int(str(value).strip()) if isinstance(value, str) else int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}.") from exc

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        value = self.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{key} must be a number, got {value!r}.") from exc

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ConfigurationError(f"{key} must be a boolean, got {value!r}.")

    def get_strings(self, key: str) -> list[str]:
        """Return an ordered list of non-empty strings.

        Lists are taken as-is; a plain string is split on commas
        (``"item,user"`` → ``["item", "user"]``).  Missing key → ``[]``.
        """
        value = self.get(key)
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            items = [str(v).strip() for v in value]
        else:
            items = [part.strip() for part in str(value).split(",")]
        return [item for item in items if item]

    def __repr__(self) -> str:
        return f"Configuration({len(self._values)} keys)"
