"""erythroid-ir: Intron-retention analysis across erythroid maturation stages.

This package provides tools for:
- Loading per-intron, per-sample retention tables produced upstream
- Row filtering (low TPM, perfect PSI, low fragment support, zero coverage)
- Zero-coverage enrichment of the retention dataset
- Reconciling external significance-test output with raw retention values
- Complete-case retention matrices and k-means retention-pattern clustering
- Per-stage empirical distribution curves of mean retention

Stage ordering (pro < ebaso < lbaso < poly < ortho) is defined once in
``erythroid_ir.config`` and threaded through every component.

Example usage:
    >>> from erythroid_ir.pipeline import AnalysisConfig, RetentionPipeline
    >>> from erythroid_ir.core.retention import RetentionTableBuilder
    >>> from erythroid_ir.core.testing import PrecomputedTester
    >>>
    >>> config = AnalysisConfig.from_yaml("analysis.yaml")
    >>> dataset = RetentionTableBuilder(config.conditions).build("retention.tsv")
    >>> pipeline = RetentionPipeline(config, tester=PrecomputedTester("test.tsv"))
    >>> result = pipeline.run(dataset, coverage=coverage)
"""

__version__ = "0.1.0"
