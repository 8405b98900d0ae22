"""Command-line interface for erythroid-ir.

Provides CLI commands for running the retention analysis from exported
tables.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..exceptions import RetentionAnalysisError


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Setup logging for CLI commands."""
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    return logging.getLogger("erythroid_ir")


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _load_config(config: Optional[str]):
    from erythroid_ir.pipeline import AnalysisConfig

    if config:
        return AnalysisConfig.from_yaml(Path(config))
    return AnalysisConfig.default()


@click.group()
@click.version_option(version=__version__, prog_name="erythroid-ir")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """erythroid-ir: Intron-retention analysis across erythroid maturation.

    Filters per-sample retention measurements, reconciles them with the
    external retention test, clusters introns by their retention profile
    across pro, ebaso, lbaso, poly and ortho, and computes per-stage
    retention distributions.

    Examples:

        # Full analysis from exported tables
        erythroid-ir run -r retention.tsv -t ir_test.tsv --coverage zc.tsv -o out/

        # No-filter summary only
        erythroid-ir summarize -r retention.tsv -t ir_test.tsv -o summary.tsv

        # Print the resolved configuration
        erythroid-ir show-config -c analysis.yaml
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["logger"] = setup_logging(verbose, debug)


@cli.command()
@click.option("--retention", "-r", required=True, type=click.Path(exists=True),
              help="Long retention table (intron, sample, condition, tpm, retention, ...)")
@click.option("--samples", "-s", type=click.Path(exists=True),
              help="Sample to condition table")
@click.option("--introns", type=click.Path(exists=True),
              help="Intron annotation table (intron, gene, intron_extension)")
@click.option("--tests", "-t", "tests_path", type=click.Path(exists=True),
              help="Exported retention test results (intron, condition, mean_retention, ...)")
@click.option("--coverage", type=click.Path(exists=True),
              help="Zero-coverage summary keyed by intron and sample")
@click.option("--config", "-c", type=click.Path(exists=True),
              help="Analysis configuration file (YAML)")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output directory")
@click.option("--seed", type=int, default=None, help="Override the clustering seed")
@click.option("--n-workers", type=int, default=None,
              help="Parallel workers for distribution estimation")
@click.pass_context
def run(
    ctx: click.Context,
    retention: str,
    samples: Optional[str],
    introns: Optional[str],
    tests_path: Optional[str],
    coverage: Optional[str],
    config: Optional[str],
    output_path: str,
    seed: Optional[int],
    n_workers: Optional[int],
) -> None:
    """Run the full retention analysis.

    Writes the no-filter summary, filter report, retention matrix, cluster
    tables, distribution curves and a run manifest to the output directory.
    """
    verbose = ctx.obj["verbose"] or ctx.obj["debug"]

    from erythroid_ir.core.coverage import load_coverage_summary
    from erythroid_ir.core.retention import RetentionTableBuilder
    from erythroid_ir.core.testing import PrecomputedTester
    from erythroid_ir.pipeline import PipelineLogger, RetentionPipeline

    pipeline_logger = None
    try:
        cfg = _load_config(config)
        if seed is not None:
            cfg.clustering.random_seed = seed
        if n_workers is not None:
            cfg.distribution.n_workers = n_workers

        out_dir = Path(output_path)
        pipeline_logger = PipelineLogger(
            str(out_dir / cfg.output.log_dir),
            log_level="DEBUG" if ctx.obj["debug"] else ("INFO" if verbose else "WARNING"),
        )
        pipeline_logger.setup()

        builder = RetentionTableBuilder(cfg.conditions, logger=pipeline_logger.logger)
        dataset = builder.build(retention, samples=samples, intron_genes=introns)
        coverage_table = (
            load_coverage_summary(coverage, cfg.coverage_columns) if coverage else None
        )
        tester = PrecomputedTester(tests_path, logger=pipeline_logger.logger) if tests_path else None

        pipeline = RetentionPipeline(cfg, tester=tester, logger=pipeline_logger)
        result = pipeline.run(dataset, coverage=coverage_table)
        written = pipeline.write_outputs(result, out_dir)
    except (RetentionAnalysisError, FileNotFoundError, ValueError) as e:
        _fail(e)
        return
    finally:
        if pipeline_logger is not None:
            pipeline_logger.close()

    click.echo(f"Summary rows: {len(result.summary)}")
    click.echo(
        f"Clustered introns: {len(result.matrix.matrix)} "
        f"({result.matrix.n_excluded} incomplete excluded)"
    )
    click.echo(f"Outputs written to: {out_dir} ({len(written)} files)")


@cli.command()
@click.option("--retention", "-r", required=True, type=click.Path(exists=True),
              help="Long retention table")
@click.option("--samples", "-s", type=click.Path(exists=True),
              help="Sample to condition table")
@click.option("--introns", type=click.Path(exists=True),
              help="Intron annotation table")
@click.option("--tests", "-t", "tests_path", type=click.Path(exists=True),
              help="Exported retention test results")
@click.option("--config", "-c", type=click.Path(exists=True),
              help="Analysis configuration file (YAML)")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output summary table (.tsv or .csv)")
@click.pass_context
def summarize(
    ctx: click.Context,
    retention: str,
    samples: Optional[str],
    introns: Optional[str],
    tests_path: Optional[str],
    config: Optional[str],
    output_path: str,
) -> None:
    """Write the no-filter summary without filtering or clustering.

    Test results are joined onto every retention record; pairs without a
    result get mean and variance from the raw retention values.
    """
    logger = ctx.obj["logger"]

    from erythroid_ir.core.reconcile import ResultReconciler
    from erythroid_ir.core.retention import RetentionTableBuilder
    from erythroid_ir.core.testing import TEST_RESULT_COLUMNS, PrecomputedTester
    from erythroid_ir.io import write_dataframe

    import pandas as pd

    try:
        cfg = _load_config(config)
        dataset = RetentionTableBuilder(cfg.conditions, logger=logger).build(
            retention, samples=samples, intron_genes=introns
        )
        if tests_path:
            test_results = PrecomputedTester(tests_path, logger=logger).test(dataset)
        else:
            test_results = pd.DataFrame(columns=TEST_RESULT_COLUMNS)

        reconciler = ResultReconciler(cfg.conditions, logger=logger)
        summary = reconciler.no_filter_summary(
            reconciler.reconcile(reconciler.join(dataset, test_results))
        )
        path = write_dataframe(summary, output_path)
    except (RetentionAnalysisError, FileNotFoundError, ValueError) as e:
        _fail(e)
        return

    click.echo(f"Wrote {len(summary)} summary rows to: {path}")


@cli.command("show-config")
@click.option("--config", "-c", type=click.Path(exists=True),
              help="Analysis configuration file (YAML)")
def show_config(config: Optional[str]) -> None:
    """Print the resolved analysis configuration as YAML."""
    try:
        cfg = _load_config(config)
    except (RetentionAnalysisError, FileNotFoundError, ValueError) as e:
        _fail(e)
        return
    click.echo(cfg.to_yaml(), nl=False)


def main() -> None:
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
