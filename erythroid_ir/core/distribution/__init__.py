"""Distribution module for per-condition retention levels.

Computes the empirical CDF and inverse CDF of per-intron mean retention
for every condition on a fixed grid of retention levels.

Example Usage
-------------
>>> from erythroid_ir.core.distribution import (
...     DistributionConfig, DistributionEstimator,
... )
>>> estimator = DistributionEstimator(config=DistributionConfig(n_workers=2))
>>> result = estimator.estimate(summary)
>>> curves = result.slice(upper=0.5)
"""

# Configuration
from .config import DistributionConfig

# Estimation
from .estimator import (
    CURVE_COLUMNS,
    DistributionCurve,
    DistributionEstimator,
    DistributionResult,
)

__all__ = [
    # Config
    "DistributionConfig",
    # Estimation
    "CURVE_COLUMNS",
    "DistributionCurve",
    "DistributionEstimator",
    "DistributionResult",
]
