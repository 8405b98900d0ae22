"""Zero-coverage enrichment.

Example Usage
-------------
>>> from erythroid_ir.core.coverage import CoverageEnricher, load_coverage_summary
>>> coverage = load_coverage_summary("zero_coverage.tsv")
>>> enriched = CoverageEnricher().enrich(dataset, coverage)
"""

from .enricher import (
    DEFAULT_COVERAGE_COLUMNS,
    CoverageEnricher,
    load_coverage_summary,
)

__all__ = [
    "DEFAULT_COVERAGE_COLUMNS",
    "CoverageEnricher",
    "load_coverage_summary",
]
