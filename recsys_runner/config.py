"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``RECSYS_RUNNER_*`` prefix

Entry points:
  ``load_config(config_path=None) -> AppConfig``
  ``build_configuration(app_config, job_path=None, overrides=None) -> Configuration``

``AppConfig`` carries the ambient settings (logging, debug) plus the ``[job]``
defaults, flattened to dotted keys.  A job file and ``key=value`` overrides
are layered on top of those defaults to produce the ``Configuration`` that a
``RecommenderJob`` runs with.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Iterable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from recsys_runner.job.configuration import Configuration

# ── Sub-config models ─────────────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    ``job`` holds the default job properties as a flat dotted-key dict, e.g.
    ``{"dfs.result.dir": "results", "rec.eval.enable": True}``.
    """

    model_config = ConfigDict(frozen=True)

    logging: LoggingConfig = LoggingConfig()
    job: dict[str, Any] = {}
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply RECSYS_RUNNER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def load_job_file(job_path: Path) -> dict[str, Any]:
    """Read a job TOML file and flatten it to dotted keys.

    All of these spell the same property::

        [data.model]
        format = "text"

        [data]
        model.format = "text"

        "data.model.format" = "text"

    A top-level ``[job]`` table, if present, is unwrapped first so the same
    file can double as an application config.

    Raises:
        FileNotFoundError: If ``job_path`` does not exist.
    """
    job_path = Path(job_path)
    if not job_path.exists():
        raise FileNotFoundError(f"Job file not found: {job_path}")

    with open(job_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    if isinstance(raw.get("job"), dict):
        raw = raw["job"]
    return flatten_properties(raw)


def build_configuration(
    app_config: AppConfig,
    job_path: Optional[Path] = None,
    overrides: Optional[Iterable[str]] = None,
) -> Configuration:
    """Layer job defaults, an optional job file and CLI overrides.

    Args:
        app_config: Loaded application config (supplies ``[job]`` defaults).
        job_path:   Optional job TOML file.
        overrides:  ``key=value`` strings; values stay strings and are coerced
                    by the ``Configuration`` getters.

    Raises:
        ValueError: If an override is not of the form ``key=value``.
    """
    values: dict[str, Any] = dict(app_config.job)
    if job_path is not None:
        values.update(load_job_file(job_path))
    for item in overrides or ():
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Override must look like key=value, got '{item}'.")
        values[key.strip()] = value.strip()
    return Configuration(values)


def flatten_properties(raw: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested TOML tables into ``{"a.b.c": value}``."""
    flat: dict[str, Any] = {}
    for key, val in raw.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(val, dict):
            flat.update(flatten_properties(val, full_key))
        else:
            flat[full_key] = val
    return flat


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply RECSYS_RUNNER_* env vars to the raw config dict.

    Supported overrides:
      RECSYS_RUNNER_LOG_LEVEL   → raw["logging"]["level"]
      RECSYS_RUNNER_RESULT_DIR  → raw["job"]["dfs.result.dir"]
      RECSYS_RUNNER_DEBUG       → raw["debug"]
    """
    if log_level := os.environ.get("RECSYS_RUNNER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if result_dir := os.environ.get("RECSYS_RUNNER_RESULT_DIR"):
        raw.setdefault("job", {})["dfs.result.dir"] = result_dir

    if debug := os.environ.get("RECSYS_RUNNER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        logging=LoggingConfig(**raw.get("logging", {})),
        job=flatten_properties(raw.get("job", {})),
        debug=raw.get("debug", False),
    )
