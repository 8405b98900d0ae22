"""Utility functions for erythroid-ir.

Provides statistical helpers used across modules.
"""

from .stats import (
    ecdf_on_grid,
    retention_grid,
    sample_variance,
)

__all__ = [
    "ecdf_on_grid",
    "retention_grid",
    "sample_variance",
]
