"""Tests for neurodeg init-config."""

from pathlib import Path

from click.testing import CliRunner

from neurodeg.cli.main import cli
from neurodeg.core import AnalysisConfig


class TestInitConfig:
    def test_writes_defaults(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "analysis.yaml"
        result = runner.invoke(cli, ["init-config", str(path)])
        assert result.exit_code == 0
        assert "Wrote default configuration" in result.output
        assert AnalysisConfig.from_yaml(path) == AnalysisConfig()

    def test_refuses_to_overwrite(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "analysis.yaml"
        path.write_text("soma_min_area: 5\n")
        result = runner.invoke(cli, ["init-config", str(path)])
        assert result.exit_code == 1
        assert "exists" in result.output
        assert path.read_text() == "soma_min_area: 5\n"

    def test_force(self, runner: CliRunner, tmp_path: Path):
        path = tmp_path / "analysis.yaml"
        path.write_text("soma_min_area: 5\n")
        result = runner.invoke(cli, ["init-config", str(path), "--force"])
        assert result.exit_code == 0
        assert AnalysisConfig.from_yaml(path).soma_min_area == 20.0
