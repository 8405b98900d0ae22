"""Result reconciliation and summary tables.

Example Usage
-------------
>>> from erythroid_ir.core.reconcile import ResultReconciler
>>> reconciler = ResultReconciler()
>>> reconciled = reconciler.reconcile(reconciler.join(dataset, test_results))
>>> summary = reconciler.no_filter_summary(reconciled)
"""

from .reconciler import (
    FILLED_COL,
    SUMMARY_COLUMNS,
    ResultReconciler,
    significant_introns,
)

__all__ = [
    "FILLED_COL",
    "SUMMARY_COLUMNS",
    "ResultReconciler",
    "significant_introns",
]
