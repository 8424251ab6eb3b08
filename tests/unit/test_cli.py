"""Tests for CLI commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from reqstats.cli import app, read_samples


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


@pytest.fixture
def samples_file(tmp_path: Path) -> Path:
    """Create a samples file with two URIs."""
    path = tmp_path / "samples.txt"
    path.write_text(
        """
# captured latencies
/orders,12.0
/orders,14.5
/orders,11.0
/users,3.0
/users,3.0
"""
    )
    return path


class TestReadSamples:
    """Test samples file parsing."""

    def test_bare_values_use_default_uri(self, tmp_path: Path):
        """Lines without a URI go to the default URI."""
        path = tmp_path / "s.txt"
        path.write_text("1.5\n\n2.5\n")
        assert read_samples(path, default_uri="/x") == {"/x": [1.5, 2.5]}

    def test_bad_number(self, tmp_path: Path):
        """Non-numeric values report the line."""
        path = tmp_path / "s.txt"
        path.write_text("1.5\nfast\n")
        with pytest.raises(ValueError, match=":2:"):
            read_samples(path, default_uri="/x")


class TestSelftest:
    """Test the selftest command."""

    def test_selftest_passes(self, cli_runner: CliRunner, tmp_path: Path, monkeypatch):
        """All checks pass without writing a chart."""
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(app, ["selftest"])
        assert result.exit_code == 0, result.output
        assert "Failed" not in result.output
        assert result.output.count("Passed") == 6
        assert not (tmp_path / "histogram.txt").exists()

    def test_selftest_graph(self, cli_runner: CliRunner, tmp_path: Path, monkeypatch):
        """--graph writes histogram.txt."""
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(app, ["selftest", "--graph"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "histogram.txt").exists()


class TestAnalyze:
    """Test the analyze command."""

    def test_summary_and_charts(self, cli_runner: CliRunner, samples_file: Path, tmp_path: Path):
        """Every URI is summarized and charted."""
        result = cli_runner.invoke(
            app, ["analyze", str(samples_file), "--config", str(tmp_path / "none.toml")]
        )
        assert result.exit_code == 0, result.output
        assert "/orders" in result.output
        assert "/users" in result.output
        assert "3 3 " in result.output

    def test_graph_uses_configured_path(
        self, cli_runner: CliRunner, samples_file: Path, tmp_path: Path
    ):
        """--graph writes the selected URI's chart to histogram_path."""
        chart = tmp_path / "chart.txt"
        config = tmp_path / "reqstats.toml"
        config.write_text(f'[reqstats]\nmax_bins = 2\nhistogram_path = "{chart.as_posix()}"\n')

        result = cli_runner.invoke(
            app,
            ["analyze", str(samples_file), "--uri", "/users", "--config", str(config), "--graph"],
        )
        assert result.exit_code == 0, result.output
        assert chart.read_text().endswith("3 3 \n")

    def test_unknown_uri(self, cli_runner: CliRunner, samples_file: Path, tmp_path: Path):
        """Asking for a URI with no samples exits 1."""
        result = cli_runner.invoke(
            app,
            ["analyze", str(samples_file), "--uri", "/nope", "--config", str(tmp_path / "x.toml")],
        )
        assert result.exit_code == 1

    @pytest.mark.parametrize("value", ["inf", "nan", "-1.0"])
    def test_non_finite_sample(
        self, cli_runner: CliRunner, tmp_path: Path, value: str
    ):
        """Infinite, NaN or negative samples exit 2 with the offending line."""
        path = tmp_path / "s.txt"
        path.write_text(f"1.0\n2.0\n3.0\n{value}\n")
        result = cli_runner.invoke(
            app, ["analyze", str(path), "--config", str(tmp_path / "x.toml")]
        )
        assert result.exit_code == 2
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert ":4:" in result.output

    def test_invalid_max_bins(self, cli_runner: CliRunner, samples_file: Path, tmp_path: Path):
        """Non-positive --max-bins is a configuration error."""
        result = cli_runner.invoke(
            app,
            ["analyze", str(samples_file), "--max-bins", "0", "--config", str(tmp_path / "x.toml")],
        )
        assert result.exit_code == 2
        assert "max_bins" in result.output


class TestVersion:
    """Test --version."""

    def test_version(self, cli_runner: CliRunner):
        """Version is printed."""
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "reqstats version" in result.output
