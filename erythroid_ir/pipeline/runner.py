"""End-to-end retention analysis run.

Wires the core engines into stages on an ``InMemoryExecutor``:

    filter -> coverage -> test -> reconcile -> matrix -> cluster
                                            \\-> distribution

The reconcile stage joins test results onto the dataset as built (before
any row filters), so every measured (intron, condition) pair receives a
summary even when its rows were filtered out before testing.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

import pandas as pd

from .. import __version__
from ..core.clustering import (
    ASSIGNMENT_COLUMNS,
    ClusterEngine,
    ClusteringResult,
    MatrixBuilder,
    MatrixResult,
)
from ..core.coverage import CoverageEnricher
from ..core.distribution import DistributionEstimator, DistributionResult
from ..core.filtering import ZERO_COVERAGE, FilterChain, FilterChainResult
from ..core.reconcile import ResultReconciler, significant_introns
from ..core.retention import CONDITION_COL, INTRON_COL, RetentionDataset
from ..core.testing import MEAN_COL, TEST_RESULT_COLUMNS, SignificanceTester
from ..io import ensure_output_dir, log_yaml, write_dataframe
from .config import AnalysisConfig
from .executor import InMemoryExecutor
from .logger import PipelineLogger

PROFILE_COLUMNS = [INTRON_COL, CONDITION_COL, MEAN_COL] + ASSIGNMENT_COLUMNS[1:]


@dataclass
class PipelineResult:
    """Everything a run produced.

    Attributes
    ----------
    filter_result : FilterChainResult
        Dataset and reports after the pre-coverage filters
    post_coverage_result : FilterChainResult
        Dataset and reports after enrichment and post-coverage filters;
        this dataset is what the tester saw
    test_results : pd.DataFrame
        Validated tester output
    reconciled : pd.DataFrame
        Per-sample records with filled statistics
    summary : pd.DataFrame
        No-filter summary (one row per intron and condition)
    matrix : MatrixResult
        Complete-case retention matrix
    clustering : ClusteringResult
        Cluster assignments and labels
    distribution : DistributionResult
        Per-condition distribution curves
    durations : Dict[str, float]
        Seconds spent per stage
    """

    filter_result: FilterChainResult
    post_coverage_result: FilterChainResult
    test_results: pd.DataFrame
    reconciled: pd.DataFrame
    summary: pd.DataFrame
    matrix: MatrixResult
    clustering: ClusteringResult
    distribution: DistributionResult
    durations: Dict[str, float] = field(default_factory=dict)

    @property
    def dataset(self) -> RetentionDataset:
        """Dataset after all row filters."""
        return self.post_coverage_result.dataset

    def filter_report(self) -> pd.DataFrame:
        frames = [self.filter_result.to_frame(), self.post_coverage_result.to_frame()]
        return pd.concat(frames, ignore_index=True)

    def cluster_profiles(self) -> pd.DataFrame:
        if not self.clustering.cluster_sizes:
            return pd.DataFrame(columns=PROFILE_COLUMNS)
        return self.clustering.profiles(self.matrix.matrix)


class RetentionPipeline:
    """Run the retention analysis stages in order.

    Parameters
    ----------
    config : AnalysisConfig, optional
        Run configuration. If None, uses defaults.
    tester : SignificanceTester, optional
        External test collaborator. If None, no pair has test results and
        every summary statistic is filled from raw retention values.
    logger : PipelineLogger, optional
        Receives stage events; engines log to the same ``erythroid_ir``
        logger hierarchy.

    Example
    -------
    >>> pipeline = RetentionPipeline(AnalysisConfig(), PrecomputedTester("tests.tsv"))
    >>> result = pipeline.run(dataset, coverage=coverage)
    >>> pipeline.write_outputs(result, "out/")
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        tester: Optional[SignificanceTester] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        self.config = config or AnalysisConfig()
        self.tester = tester
        self.pipeline_logger = logger
        self.logger = logger.logger if logger is not None else logging.getLogger(__name__)

    # Stages ----------------------------------------------------------------

    def _filter(self, dataset, coverage, stage_results):
        chain = FilterChain.from_config(self.config.filters, logger=self.logger)
        return chain.apply(dataset)

    def _coverage(self, dataset, coverage, stage_results):
        filtered = stage_results["filter"].dataset
        if coverage is not None:
            enricher = CoverageEnricher(self.config.coverage_columns, logger=self.logger)
            filtered = enricher.enrich(filtered, coverage)
        else:
            self.logger.info("No coverage summary given; skipping enrichment")

        post_order = self.config.filters.post_coverage_order
        zc_col = self.config.filters.zero_coverage_col
        if ZERO_COVERAGE in post_order and zc_col not in filtered.records.columns:
            raise ValueError(
                f"The zero_coverage filter needs column '{zc_col}'; provide a coverage summary"
            )

        chain = FilterChain.from_config(
            self.config.filters,
            names=post_order,
            logger=self.logger,
        )
        return chain.apply(filtered)

    def _test(self, dataset, coverage, stage_results):
        tested = stage_results["coverage"].dataset
        if self.tester is None:
            self.logger.warning("No significance tester configured; all statistics will be filled")
            return pd.DataFrame(columns=TEST_RESULT_COLUMNS)
        results = self.tester.test(tested)
        self.logger.info("Tester '%s' returned %d results", self.tester.name, len(results))
        return results

    def _reconcile(self, dataset, coverage, stage_results):
        reconciler = ResultReconciler(self.config.conditions, logger=self.logger)
        joined = reconciler.join(dataset, stage_results["test"])
        reconciled = reconciler.reconcile(joined)
        summary = reconciler.no_filter_summary(reconciled)
        self.logger.info("No-filter summary: %d intron/condition rows", len(summary))
        return {"reconciled": reconciled, "summary": summary}

    def _matrix(self, dataset, coverage, stage_results):
        builder = MatrixBuilder(self.config.conditions, logger=self.logger)
        return builder.build(stage_results["reconcile"]["reconciled"])

    def _cluster(self, dataset, coverage, stage_results):
        engine = ClusterEngine(self.config.clustering, logger=self.logger)
        return engine.run_clustering(stage_results["matrix"].matrix)

    def _distribution(self, dataset, coverage, stage_results):
        estimator = DistributionEstimator(
            self.config.conditions, self.config.distribution, logger=self.logger
        )
        return estimator.estimate(stage_results["reconcile"]["summary"])

    def build_executor(self) -> InMemoryExecutor:
        executor = InMemoryExecutor(self.pipeline_logger)
        executor.register_stage("filter", self._filter, name="Row filters")
        executor.register_stage(
            "coverage", self._coverage, depends_on=["filter"], name="Coverage enrichment"
        )
        executor.register_stage(
            "test", self._test, depends_on=["coverage"], name="Significance test"
        )
        executor.register_stage(
            "reconcile", self._reconcile, depends_on=["test"], name="Result reconciliation"
        )
        executor.register_stage(
            "matrix", self._matrix, depends_on=["reconcile"], name="Retention matrix"
        )
        executor.register_stage(
            "cluster", self._cluster, depends_on=["matrix"], name="k-means clustering"
        )
        executor.register_stage(
            "distribution",
            self._distribution,
            depends_on=["reconcile"],
            name="Retention distributions",
        )
        return executor

    # Public API ------------------------------------------------------------

    def run(
        self,
        dataset: RetentionDataset,
        coverage: Optional[pd.DataFrame] = None,
    ) -> PipelineResult:
        """Run all stages on a dataset.

        Parameters
        ----------
        dataset : RetentionDataset
            Dataset as built; not modified
        coverage : pd.DataFrame, optional
            Coverage summary keyed by (intron, sample)

        Returns
        -------
        PipelineResult

        Raises
        ------
        MergeError
            If coverage is given and a filtered record has no coverage entry
        LabelMismatchError
            If declared cluster sizes do not match the observed sizes
        """
        executor = self.build_executor()
        results = executor.run(dataset=dataset, coverage=coverage)

        return PipelineResult(
            filter_result=results["filter"],
            post_coverage_result=results["coverage"],
            test_results=results["test"],
            reconciled=results["reconcile"]["reconciled"],
            summary=results["reconcile"]["summary"],
            matrix=results["matrix"],
            clustering=results["cluster"],
            distribution=results["distribution"],
            durations=dict(executor.durations),
        )

    def manifest(self, result: PipelineResult, outputs: Dict[str, str]) -> Dict[str, Any]:
        """Run record written next to the outputs."""
        significant = significant_introns(result.summary, self.config.qvalue_threshold)
        return {
            "erythroid_ir_version": __version__,
            "timestamp": datetime.now().isoformat(timespec="seconds"),
            "tester": self.tester.name if self.tester is not None else None,
            "config": self.config.to_dict(),
            "counts": {
                "records_after_filters": result.dataset.n_records,
                "introns_after_filters": result.dataset.n_introns,
                "test_results": len(result.test_results),
                "summary_rows": len(result.summary),
                "significant_pairs": len(significant),
                "matrix_introns": len(result.matrix.matrix),
                "matrix_excluded_introns": result.matrix.n_excluded,
                "cluster_sizes": {
                    result.clustering.cluster_labels[c]: size
                    for c, size in result.clustering.cluster_sizes.items()
                },
                "distribution_n_obs": {
                    condition: curve.n_obs
                    for condition, curve in result.distribution.curves.items()
                },
                "distribution_skipped": list(result.distribution.skipped_conditions),
            },
            "durations_sec": {k: round(v, 3) for k, v in result.durations.items()},
            "outputs": outputs,
        }

    def write_outputs(
        self,
        result: PipelineResult,
        out_dir: Union[str, Path],
    ) -> Dict[str, Path]:
        """Write every output table and the run manifest.

        Returns
        -------
        Dict[str, Path]
            Map of output name to written path
        """
        out_dir = ensure_output_dir(out_dir)
        names = self.config.output
        distribution = result.distribution.to_frame()

        tables = {
            "no_filter_summary": (result.summary, False),
            "filter_report": (result.filter_report(), False),
            "retention_matrix": (result.matrix.matrix, True),
            "cluster_assignments": (result.clustering.assignments, False),
            "cluster_summary": (result.clustering.summary_frame(), False),
            "cluster_profiles": (result.cluster_profiles(), False),
            "distribution_curves": (distribution, False),
            "distribution_figure": (
                result.distribution.slice(upper=self.config.distribution.figure_upper),
                False,
            ),
        }

        written: Dict[str, Path] = {}
        for key, (frame, index) in tables.items():
            written[key] = write_dataframe(frame, out_dir / getattr(names, key), index=index)
            self.logger.info("Wrote %s (%d rows) to %s", key, len(frame), written[key])

        manifest_path = out_dir / names.manifest
        manifest_path.unlink(missing_ok=True)
        log_yaml(
            manifest_path,
            self.manifest(result, {k: p.name for k, p in written.items()}),
        )
        written["manifest"] = manifest_path
        return written
