"""Significance-tester interface and adapters.

Example Usage
-------------
>>> from erythroid_ir.core.testing import PrecomputedTester
>>> tester = PrecomputedTester("retention_test.tsv")
>>> results = tester.test(filtered_dataset)
"""

from .base import (
    MEAN_COL,
    PVALUE_COL,
    QVALUE_COL,
    STAT_COLUMNS,
    TEST_RESULT_COLUMNS,
    VAR_COL,
    SignificanceTester,
    validate_test_results,
)
from .precomputed import PrecomputedTester

__all__ = [
    "MEAN_COL",
    "PVALUE_COL",
    "QVALUE_COL",
    "STAT_COLUMNS",
    "TEST_RESULT_COLUMNS",
    "VAR_COL",
    "SignificanceTester",
    "validate_test_results",
    "PrecomputedTester",
]
