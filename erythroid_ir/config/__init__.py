"""Centralized configuration for erythroid-ir.

This module provides the maturation-stage ordering used by all core
modules (filtering, reconciliation, matrix building, distributions).

Example
-------
>>> from erythroid_ir.config import ConditionOrder, ERYTHROID_STAGES
>>> print(ERYTHROID_STAGES)
('pro', 'ebaso', 'lbaso', 'poly', 'ortho')
>>> ConditionOrder().sort(["ortho", "pro"])
['pro', 'ortho']
"""

from .conditions import (
    ERYTHROID_STAGES,
    ConditionOrder,
)

__all__ = [
    "ERYTHROID_STAGES",
    "ConditionOrder",
]
