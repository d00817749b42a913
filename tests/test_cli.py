"""Tests for the CLI interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from namewise.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def trained_project(tmp_project: Path) -> Path:
    """Create a tmp_project with a trained model."""
    runner = CliRunner()
    result = runner.invoke(main, ["init", "--path", str(tmp_project)])
    assert result.exit_code == 0, f"Init failed: {result.output}"
    return tmp_project


class TestCLIInit:
    def test_init_basic(self, runner: CliRunner, tmp_project: Path):
        result = runner.invoke(main, ["init", "--path", str(tmp_project)])
        assert result.exit_code == 0
        assert "Initializing" in result.output

    def test_init_creates_namewise_dir(self, runner: CliRunner, tmp_project: Path):
        runner.invoke(main, ["init", "--path", str(tmp_project)])
        assert (tmp_project / ".namewise" / "config.json").exists()
        assert (tmp_project / ".namewise" / "model.db").exists()

    def test_init_options(self, runner: CliRunner, tmp_project: Path):
        result = runner.invoke(
            main, ["init", "--path", str(tmp_project), "--strategy", "all", "--order", "3"]
        )
        assert result.exit_code == 0
        saved = json.loads((tmp_project / ".namewise" / "config.json").read_text())
        assert saved["renamer"]["strategy"] == "all"
        assert saved["model"]["order"] == 3

    def test_init_unknown_strategy(self, runner: CliRunner, tmp_project: Path):
        result = runner.invoke(
            main, ["init", "--path", str(tmp_project), "--strategy", "reflection"]
        )
        assert result.exit_code != 0

    def test_init_nonexistent_path(self, runner: CliRunner):
        result = runner.invoke(main, ["init", "--path", "/nonexistent/path"])
        assert result.exit_code != 0

    def test_init_without_sources(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["init", "--path", str(tmp_path)])
        assert result.exit_code != 0


class TestCLIStatus:
    def test_status(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(main, ["status", "--path", str(trained_project)])
        assert result.exit_code == 0

    def test_status_no_model(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["status", "--path", str(tmp_path)])
        assert result.exit_code != 0


class TestCLITrain:
    def test_retrain(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main, ["train", "--path", str(trained_project), "--workers", "2"]
        )
        assert result.exit_code == 0
        assert "Model saved" in result.output


class TestCLIRank:
    def test_rank(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main,
            ["rank", str(trained_project / "carts.py"), "t", "--path", str(trained_project)],
        )
        assert result.exit_code == 0, result.output
        assert "natural" in result.output

    def test_rank_without_model(self, runner: CliRunner, tmp_project: Path):
        result = runner.invoke(
            main, ["rank", str(tmp_project / "carts.py"), "t", "--path", str(tmp_project)]
        )
        assert result.exit_code != 0


class TestCLIReview:
    def test_review(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main, ["review", str(trained_project / "carts.py"), "--path", str(trained_project)]
        )
        assert result.exit_code == 0, result.output

    def test_review_variables_only(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main,
            [
                "review", str(trained_project / "orders.py"),
                "--variables", "--path", str(trained_project),
            ],
        )
        assert result.exit_code == 0, result.output

    def test_review_unparsable_file(self, runner: CliRunner, trained_project: Path):
        broken = trained_project / "broken.py"
        broken.write_text("def broken(:\n")
        result = runner.invoke(main, ["review", str(broken), "--path", str(trained_project)])
        assert result.exit_code != 0


class TestCLITriage:
    def test_triage(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main, ["triage", "--path", str(trained_project), "--fraction", "0.5"]
        )
        assert result.exit_code == 0, result.output


class TestCLIFormatting:
    @pytest.fixture
    def formatting_project(self, tmp_project: Path) -> Path:
        result = CliRunner().invoke(
            main, ["init", "--path", str(tmp_project), "--strategy", "formatting"]
        )
        assert result.exit_code == 0, f"Init failed: {result.output}"
        return tmp_project

    def test_review(self, runner: CliRunner, formatting_project: Path):
        carts = formatting_project / "carts.py"
        carts.write_text(carts.read_text().replace(", ", ","))
        result = runner.invoke(main, ["review", str(carts), "--path", str(formatting_project)])
        assert result.exit_code == 0, result.output

    def test_triage(self, runner: CliRunner, formatting_project: Path):
        result = runner.invoke(
            main, ["triage", "--path", str(formatting_project), "--fraction", "1.0"]
        )
        assert result.exit_code == 0, result.output
        assert "3 files scored" in result.output

    def test_rank_points_to_review(self, runner: CliRunner, formatting_project: Path):
        result = runner.invoke(
            main,
            ["rank", str(formatting_project / "carts.py"), "x", "--path", str(formatting_project)],
        )
        assert result.exit_code != 0
        assert "review" in result.output


class TestCLIConfig:
    def test_config_show(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(main, ["config", "show", "--path", str(trained_project)])
        assert result.exit_code == 0
        assert "renamer" in result.output

    def test_config_get(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main, ["config", "get", "model.order", "--path", str(trained_project)]
        )
        assert result.exit_code == 0
        assert "model.order = 5" in result.output

    def test_config_set(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main,
            ["config", "set", "suggestions.max_suggestions", "3", "--path", str(trained_project)],
        )
        assert result.exit_code == 0
        saved = json.loads((trained_project / ".namewise" / "config.json").read_text())
        assert saved["suggestions"]["max_suggestions"] == 3

    def test_config_set_invalid_value(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main, ["config", "set", "model.order", "0", "--path", str(trained_project)]
        )
        assert result.exit_code != 0

    def test_config_unknown_key(self, runner: CliRunner, trained_project: Path):
        result = runner.invoke(
            main, ["config", "get", "nope.key", "--path", str(trained_project)]
        )
        assert result.exit_code != 0
