"""Unit tests for the command-line interface."""

import pytest
import pandas as pd
import yaml
from click.testing import CliRunner

from erythroid_ir import __version__
from erythroid_ir.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _run_args(input_tables, out_dir, *extra):
    return [
        "run",
        "-r", str(input_tables["retention"]),
        "-s", str(input_tables["samples"]),
        "--introns", str(input_tables["introns"]),
        "-t", str(input_tables["tests"]),
        "--coverage", str(input_tables["coverage"]),
        "-o", str(out_dir),
        *extra,
    ]


class TestCliGroup:
    """Tests for the top-level command group."""

    def test_version(self, runner):
        """Test --version prints the package version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        """Test help output names every command."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "summarize", "show-config"):
            assert command in result.output


class TestRunCommand:
    """Tests for `erythroid-ir run`."""

    def test_full_run(self, runner, input_tables, sample_analysis_config, tmp_output_dir):
        """Test a full run writes every output and reports counts."""
        args = _run_args(input_tables, tmp_output_dir, "-c", str(sample_analysis_config))
        result = runner.invoke(cli, args, obj={})

        assert result.exit_code == 0, result.output
        assert "Summary rows: 50" in result.output
        assert "Clustered introns: 9" in result.output
        for name in ("no_filter_summary.tsv", "cluster_assignments.csv", "run_manifest.yaml"):
            assert (tmp_output_dir / name).exists()
        assert list((tmp_output_dir / "logs").glob("retention_*.log"))

        assignments = pd.read_csv(tmp_output_dir / "cluster_assignments.csv")
        assert set(assignments["cluster_label"]) == {"C1", "C2", "C3"}

    def test_seed_and_workers_override(self, runner, input_tables, sample_analysis_config, tmp_output_dir):
        """Test command-line overrides reach the recorded configuration."""
        args = _run_args(
            input_tables, tmp_output_dir,
            "-c", str(sample_analysis_config), "--seed", "99", "--n-workers", "2",
        )
        result = runner.invoke(cli, args, obj={})
        assert result.exit_code == 0, result.output

        manifest = yaml.safe_load((tmp_output_dir / "run_manifest.yaml").read_text().split("---")[0])
        assert manifest["config"]["clustering"]["random_seed"] == 99
        assert manifest["config"]["distribution"]["n_workers"] == 2

    def test_too_many_clusters_fails(self, runner, input_tables, tmp_path, tmp_output_dir):
        """Test analysis errors exit with status 1 and a message."""
        config = tmp_path / "k20.yaml"
        config.write_text("analysis:\n  clustering:\n    n_clusters: 20\n")
        args = _run_args(input_tables, tmp_output_dir, "-c", str(config))
        result = runner.invoke(cli, args, obj={})
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_stale_declared_sizes_fail(self, runner, input_tables, tmp_path, tmp_output_dir):
        """Test mismatching declared cluster sizes exit with status 1."""
        config = tmp_path / "sizes.yaml"
        config.write_text(
            "analysis:\n  clustering:\n    n_clusters: 2\n    expected_sizes: [0, 9]\n"
        )
        args = _run_args(input_tables, tmp_output_dir, "-c", str(config))
        result = runner.invoke(cli, args, obj={})
        assert result.exit_code == 1
        assert "declared sizes" in result.output

    def test_missing_input(self, runner, tmp_path, tmp_output_dir):
        """Test nonexistent input paths are rejected by option parsing."""
        result = runner.invoke(
            cli, ["run", "-r", str(tmp_path / "missing.tsv"), "-o", str(tmp_output_dir)], obj={}
        )
        assert result.exit_code == 2


class TestSummarizeCommand:
    """Tests for `erythroid-ir summarize`."""

    def test_summarize(self, runner, input_tables, tmp_output_dir):
        """Test writing the no-filter summary."""
        out = tmp_output_dir / "summary.tsv"
        result = runner.invoke(
            cli,
            [
                "summarize",
                "-r", str(input_tables["retention"]),
                "-s", str(input_tables["samples"]),
                "--introns", str(input_tables["introns"]),
                "-t", str(input_tables["tests"]),
                "-o", str(out),
            ],
            obj={},
        )
        assert result.exit_code == 0, result.output
        assert "Wrote 50 summary rows" in result.output
        summary = pd.read_csv(out, sep="\t")
        assert summary["mean_retention"].notna().all()
        assert summary["gene"].notna().all()

    def test_summarize_without_tests(self, runner, input_tables, tmp_output_dir):
        """Test summary without test results has no p-values."""
        out = tmp_output_dir / "summary.csv"
        result = runner.invoke(
            cli, ["summarize", "-r", str(input_tables["retention"]), "-o", str(out)], obj={}
        )
        assert result.exit_code == 0, result.output
        summary = pd.read_csv(out)
        assert summary["pvalue"].isna().all()

    def test_bad_config(self, runner, input_tables, tmp_path, tmp_output_dir):
        """Test unknown configuration keys exit with status 1."""
        config = tmp_path / "bad.yaml"
        config.write_text("analysis:\n  clusterin: {}\n")
        result = runner.invoke(
            cli,
            [
                "summarize",
                "-r", str(input_tables["retention"]),
                "-c", str(config),
                "-o", str(tmp_output_dir / "summary.tsv"),
            ],
            obj={},
        )
        assert result.exit_code == 1
        assert "Unknown analysis settings" in result.output


class TestShowConfigCommand:
    """Tests for `erythroid-ir show-config`."""

    def test_defaults(self, runner):
        """Test default configuration is printed as YAML."""
        result = runner.invoke(cli, ["show-config"], obj={})
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["analysis"]["clustering"]["n_clusters"] == 9

    def test_from_file(self, runner, sample_analysis_config):
        """Test configuration file values are resolved."""
        result = runner.invoke(cli, ["show-config", "-c", str(sample_analysis_config)], obj={})
        assert result.exit_code == 0
        data = yaml.safe_load(result.output)
        assert data["analysis"]["filters"]["min_tpm"] == 2.0
        assert data["analysis"]["distribution"]["n_points"] == 101
