"""Test fixtures for erythroid-ir.

Provides mock data generators and test utilities.
"""

from .mock_retention import (
    create_coverage_summary,
    create_intron_genes,
    create_mock_retention,
    create_sample_table,
    create_test_results,
    intron_name,
)

__all__ = [
    "create_coverage_summary",
    "create_intron_genes",
    "create_mock_retention",
    "create_sample_table",
    "create_test_results",
    "intron_name",
]
