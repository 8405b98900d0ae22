"""Per-condition empirical distributions of mean retention.

For every condition the estimator evaluates the empirical CDF of the
per-intron mean retention on an evenly spaced grid of retention levels and
derives the complementary (inverse) CDF and the matching intron counts.
The inverse CDF over [0, 0.5] is the data behind the distribution figure.

Supports parallel evaluation across conditions via joblib.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ...config import ConditionOrder
from ...utils.stats import ecdf_on_grid, retention_grid
from ..retention import CONDITION_COL, INTRON_COL, PAIR_KEY
from ..testing import MEAN_COL
from .config import DistributionConfig

LEVEL_COL = "retention_level"
CDF_COL = "cdf"
INV_CDF_COL = "inv_cdf"
COUNT_COL = "count"
INV_COUNT_COL = "inv_count"
N_OBS_COL = "n_obs"

CURVE_COLUMNS = [
    CONDITION_COL,
    LEVEL_COL,
    CDF_COL,
    INV_CDF_COL,
    COUNT_COL,
    INV_COUNT_COL,
    N_OBS_COL,
]


@dataclass
class DistributionCurve:
    """Distribution of mean retention for one condition.

    Attributes
    ----------
    condition : str
        Condition label
    retention_level : np.ndarray
        Evenly spaced levels on [0, 1]
    cdf : np.ndarray
        Fraction of introns with mean retention <= level
    inv_cdf : np.ndarray
        1 - cdf
    count : np.ndarray
        round(cdf * n_obs)
    inv_count : np.ndarray
        n_obs - count
    n_obs : int
        Number of introns observed in the condition
    """

    condition: str
    retention_level: np.ndarray
    cdf: np.ndarray
    inv_cdf: np.ndarray
    count: np.ndarray
    inv_count: np.ndarray
    n_obs: int

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            CONDITION_COL: self.condition,
            LEVEL_COL: self.retention_level,
            CDF_COL: self.cdf,
            INV_CDF_COL: self.inv_cdf,
            COUNT_COL: self.count,
            INV_COUNT_COL: self.inv_count,
            N_OBS_COL: self.n_obs,
        })


def _condition_curve(condition: str, values: np.ndarray, grid: np.ndarray) -> DistributionCurve:
    """Build the curve for one condition (worker function for parallel execution)."""
    n_obs = int(len(values))
    cdf = ecdf_on_grid(values, grid)
    count = np.rint(cdf * n_obs).astype(int)
    return DistributionCurve(
        condition=condition,
        retention_level=grid.copy(),
        cdf=cdf,
        inv_cdf=1.0 - cdf,
        count=count,
        inv_count=n_obs - count,
        n_obs=n_obs,
    )


@dataclass
class DistributionResult:
    """Curves for all conditions with observations.

    Attributes
    ----------
    curves : Dict[str, DistributionCurve]
        Map of condition to curve, in condition order
    skipped_conditions : List[str]
        Conditions without any observed mean retention
    """

    curves: Dict[str, DistributionCurve] = field(default_factory=dict)
    skipped_conditions: List[str] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        """Long table of all curves (one row per condition and level)."""
        if not self.curves:
            return pd.DataFrame(columns=CURVE_COLUMNS)
        frames = [curve.to_frame() for curve in self.curves.values()]
        return pd.concat(frames, ignore_index=True)[CURVE_COLUMNS]

    def slice(self, upper: float = 0.5, lower: float = 0.0) -> pd.DataFrame:
        """Rows of the long table with ``lower <= retention_level <= upper``."""
        frame = self.to_frame()
        if frame.empty:
            return frame
        levels = frame[LEVEL_COL].astype(float)
        return frame.loc[(levels >= lower) & (levels <= upper)].reset_index(drop=True)


class DistributionEstimator:
    """Estimate per-condition retention distributions.

    Parameters
    ----------
    conditions : ConditionOrder, optional
        Conditions to evaluate, in output order
    config : DistributionConfig, optional
        Grid size and worker count. If None, uses defaults.
    logger : logging.Logger, optional
        Logger instance. If None, uses the module logger.

    Example
    -------
    >>> estimator = DistributionEstimator(config=DistributionConfig(n_points=1000))
    >>> result = estimator.estimate(summary)
    >>> result.slice(upper=0.5).head()
    """

    def __init__(
        self,
        conditions: Optional[ConditionOrder] = None,
        config: Optional[DistributionConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.conditions = conditions or ConditionOrder()
        self.config = config or DistributionConfig()
        self.logger = logger or logging.getLogger(__name__)

    def _per_condition_values(self, table: pd.DataFrame) -> Dict[str, np.ndarray]:
        pairs = table[PAIR_KEY + [MEAN_COL]].copy()
        pairs[INTRON_COL] = pairs[INTRON_COL].astype(str)
        pairs[CONDITION_COL] = pairs[CONDITION_COL].astype(str)
        # one value per intron within a condition
        pairs = pairs.dropna(subset=[MEAN_COL]).drop_duplicates(subset=PAIR_KEY)

        values = {}
        for condition in self.conditions:
            values[condition] = pairs.loc[
                pairs[CONDITION_COL] == condition, MEAN_COL
            ].to_numpy(dtype=float)
        return values

    def estimate(self, table: pd.DataFrame) -> DistributionResult:
        """Compute the distribution curve of every condition.

        Parameters
        ----------
        table : pd.DataFrame
            Reconciled records or the no-filter summary (intron, condition,
            mean_retention). Not modified.

        Returns
        -------
        DistributionResult
            Conditions without observations are skipped with a warning
        """
        grid = retention_grid(self.config.n_points)
        values = self._per_condition_values(table)

        result = DistributionResult()
        todo = []
        for condition, vals in values.items():
            if len(vals) == 0:
                self.logger.warning(
                    "No mean retention values for condition '%s'; skipping", condition
                )
                result.skipped_conditions.append(condition)
            else:
                todo.append(condition)

        n_workers = self.config.n_workers
        start_time = time.time()
        if n_workers > 1 and len(todo) > 1:
            self.logger.info(
                "Estimating %d condition distributions with %d workers",
                len(todo),
                n_workers,
            )
            curves = Parallel(n_jobs=n_workers, backend="loky")(
                delayed(_condition_curve)(condition, values[condition], grid)
                for condition in todo
            )
        else:
            curves = [_condition_curve(condition, values[condition], grid) for condition in todo]

        for curve in curves:
            result.curves[curve.condition] = curve
            self.logger.debug(
                "Condition %s: %d introns, median level at cdf>=0.5: %.3f",
                curve.condition,
                curve.n_obs,
                float(curve.retention_level[np.argmax(curve.cdf >= 0.5)]),
            )

        self.logger.info(
            "Computed distributions for %d conditions (%d skipped) in %.2f sec",
            len(result.curves),
            len(result.skipped_conditions),
            time.time() - start_time,
        )
        return result
