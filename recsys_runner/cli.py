"""
recsys-runner — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Build the job ``Configuration`` (defaults + job file + -D overrides).
  4. Execute action.
  5. Report result to stdout.

Install and run::

    pip install -e .
    recsys-runner --help
    recsys-runner validate-config --job config/jobs/itemknn.toml
    recsys-runner run --job config/jobs/itemknn.toml
    recsys-runner run --job config/jobs/itemknn.toml -D data.splitter.cv.number=3
    recsys-runner list-components --kind recommender
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

app = typer.Typer(
    name="recsys-runner",
    help="Recommender-algorithm experiment runner.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from recsys_runner.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _build_configuration_or_exit(config, job_path: Optional[str], overrides: Optional[List[str]]):
    """Build the job Configuration, exiting with code 1 on a bad job file or override."""
    from recsys_runner.config import build_configuration

    try:
        return build_configuration(
            config,
            job_path=Path(job_path) if job_path else None,
            overrides=overrides or [],
        )
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Job configuration invalid: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from recsys_runner.utils.logging import configure_logging
    configure_logging(config.logging)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("run")
def run(
    job_path: Optional[str] = typer.Option(
        None,
        "--job",
        "-j",
        help="Path to a job TOML file (layered over the [job] defaults).",
    ),
    overrides: Optional[List[str]] = typer.Option(
        None,
        "--define",
        "-D",
        help="Override a job property, e.g. -D rec.eval.enable=true. Repeatable.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Run one recommender job (or a cross-validation sweep).

    Exits with code 1 if any fold fails.  A failed result write is reported
    but does not fail the run unless rec.output.fail.on.error is true.
    """
    from recsys_runner.errors import RecJobError
    from recsys_runner.job.runner import RecommenderJob

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    conf = _build_configuration_or_exit(config, job_path, overrides)

    try:
        job = RecommenderJob(conf)
        result = job.run_job()
    except RecJobError as exc:
        typer.echo(f"[ERROR] Job failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Job {result.job_id} | splitter={result.split_mode} | folds={len(result.folds)}")
    for fold in result.folds:
        label = "-" if fold.fold_index is None else str(fold.fold_index)
        typer.echo(f"  fold {label:>3} | {fold.algo_name} | recommended={fold.n_recommended}")
        if fold.evaluation is not None:
            for name, value in fold.evaluation.results.items():
                typer.echo(f"      {name:<24} {value:.6f}")
        if fold.written:
            typer.echo(f"      saved: {fold.output_path}")
        elif fold.write_error:
            typer.echo(f"      [WARN] not saved: {fold.write_error}")

    if result.status == "success":
        typer.echo("[OK] Job complete.")
    else:
        typer.echo(f"[WARN] Job complete with {len(result.write_errors)} unsaved result(s).")


@app.command("validate-config")
def validate_config(
    job_path: Optional[str] = typer.Option(
        None,
        "--job",
        "-j",
        help="Optional job TOML file to validate as well.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print every job property.",
    ),
) -> None:
    """Validate the configuration and check that every component resolves.

    Exits with code 1 if the config fails validation or a configured
    component cannot be found.
    """
    from recsys_runner.components.base import SplitMode
    from recsys_runner.errors import RecJobError
    from recsys_runner.job.registry import ComponentResolver

    config = _load_config_or_exit(config_path)
    conf = _build_configuration_or_exit(config, job_path, None)
    resolver = ComponentResolver(conf)

    checks = [
        ("data.model.format", "data_model", True),
        ("rec.recommender.class", "recommender", True),
        ("rec.similarity.class", "similarity", False),
        ("rec.eval.class", "evaluator", False),
        ("rec.filter.class", "filter", False),
    ]
    try:
        mode = SplitMode.parse(conf.get_str("data.model.splitter"))
        resolved = [
            (key, resolver.get_class(key, kind, required=required)) for key, kind, required in checks
        ]
    except RecJobError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Splitter:         {mode.value}")
    for key, cls in resolved:
        name = f"{cls.__module__}.{cls.__qualname__}" if cls is not None else "(not set)"
        typer.echo(f"  {key:<22} {name}")
    typer.echo(f"  Result dir:       {conf.get_str('dfs.result.dir', '')}")

    if show_full:
        typer.echo("")
        typer.echo("Job properties (JSON):")
        typer.echo(json.dumps(conf.snapshot(), indent=2, default=str, sort_keys=True))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("list-components")
def list_components_cmd(
    kind: Optional[str] = typer.Option(
        None,
        "--kind",
        help="Only list one kind: data_model, similarity, recommender, evaluator, filter.",
    ),
) -> None:
    """List registered component driver names."""
    from recsys_runner.job.registry import COMPONENT_KINDS, list_components

    if kind is not None and kind not in COMPONENT_KINDS:
        typer.echo(f"[ERROR] Unknown kind '{kind}'. Use one of: {', '.join(COMPONENT_KINDS)}.", err=True)
        raise typer.Exit(code=1)

    for k, names in list_components(kind).items():
        typer.echo(f"{k}: {', '.join(names) if names else '(none)'}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
