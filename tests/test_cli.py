"""
Tests for the recsys-runner CLI (recsys_runner/cli.py).

What we test
------------
run:
  - End-to-end k-fold job from a config file, job file and -D override.
  - Fatal job errors exit with code 1.
validate-config:
  - Reports resolved components and exits 0 for a valid job.
  - Unresolvable component or missing config → exit code 1.
list-components:
  - Lists built-in drivers; unknown kind → exit code 1.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from recsys_runner import cli
from recsys_runner.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    """Keep the CLI from replacing pytest's log handlers."""
    monkeypatch.setattr(cli, "_configure_logging", lambda config: None)


@pytest.fixture
def config_file(tmp_path: Path, ratings_file: Path) -> Path:
    path = tmp_path / "cfg" / "default.toml"
    path.parent.mkdir(parents=True)
    path.write_text(
        "[logging]\n"
        'level = "WARNING"\n\n'
        "[job]\n"
        f'"dfs.data.dir" = "{ratings_file.parent.as_posix()}"\n'
        f'"dfs.result.dir" = "{(tmp_path / "results").as_posix()}"\n'
        '"data.model.format" = "text"\n'
        '"rec.eval.enable" = true\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def job_file(tmp_path: Path, ratings_file: Path) -> Path:
    path = tmp_path / "itemknn.toml"
    path.write_text(
        "[data]\n"
        f'input.path = "{ratings_file.name}"\n'
        'model.splitter = "kcv"\n'
        "splitter.cv.number = 5\n\n"
        "[rec]\n"
        'recommender.class = "itemknn"\n'
        'recommender.similarities = ["item"]\n'
        'similarity.class = "cos"\n',
        encoding="utf-8",
    )
    return path


class TestRunCommand:
    def test_kfold_job_writes_each_fold(self, config_file, job_file, tmp_path, ratings_file):
        result = runner.invoke(
            app,
            ["run", "--config", str(config_file), "--job", str(job_file),
             "-D", "data.splitter.cv.number=2"],
        )
        assert result.exit_code == 0, result.output
        assert "[OK] Job complete." in result.output
        assert "mae" in result.output

        out_dir = tmp_path / "results" / f"{ratings_file.name}-ItemKNN-output"
        assert sorted(p.name for p in out_dir.iterdir()) == ["ItemKNN-1", "ItemKNN-2"]
        first_line = (out_dir / "ItemKNN-1").read_text(encoding="utf-8").splitlines()[0]
        user, item, score = first_line.split(",")
        float(score)

    def test_fatal_error_exits_1(self, config_file, job_file):
        result = runner.invoke(
            app,
            ["run", "--config", str(config_file), "--job", str(job_file),
             "-D", "data.model.splitter=bogus"],
        )
        assert result.exit_code == 1

    def test_zero_folds_exits_1(self, config_file, job_file):
        result = runner.invoke(
            app,
            ["run", "--config", str(config_file), "--job", str(job_file),
             "-D", "data.splitter.cv.number=0"],
        )
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_bad_override_exits_1(self, config_file, job_file):
        result = runner.invoke(
            app, ["run", "--config", str(config_file), "--job", str(job_file), "-D", "novalue"]
        )
        assert result.exit_code == 1


class TestValidateConfigCommand:
    def test_valid_job(self, config_file, job_file):
        result = runner.invoke(
            app, ["validate-config", "--config", str(config_file), "--job", str(job_file), "--full"]
        )
        assert result.exit_code == 0, result.output
        assert "recsys_runner.components.recommenders.ItemKNNRecommender" in result.output
        assert "rec.eval.class" in result.output
        assert "[OK] Config valid." in result.output

    def test_unknown_component(self, config_file, tmp_path):
        job = tmp_path / "bad.toml"
        job.write_text('[rec]\nrecommender.class = "nosuchalgo"\n[data]\nmodel.splitter = "ratio"\n')
        result = runner.invoke(app, ["validate-config", "--config", str(config_file), "--job", str(job)])
        assert result.exit_code == 1

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "nope.toml")])
        assert result.exit_code == 1

    def test_missing_job_file(self, config_file, tmp_path):
        result = runner.invoke(
            app, ["validate-config", "--config", str(config_file), "--job", str(tmp_path / "nope.toml")]
        )
        assert result.exit_code == 1


class TestListComponentsCommand:
    def test_lists_recommenders(self):
        result = runner.invoke(app, ["list-components", "--kind", "recommender"])
        assert result.exit_code == 0
        assert result.output.startswith("recommender:")
        assert "itemknn" in result.output

    def test_lists_all_kinds(self):
        result = runner.invoke(app, ["list-components"])
        assert result.exit_code == 0
        for kind in ("data_model", "similarity", "recommender", "evaluator", "filter"):
            assert f"{kind}:" in result.output

    def test_unknown_kind(self):
        result = runner.invoke(app, ["list-components", "--kind", "widget"])
        assert result.exit_code == 1
