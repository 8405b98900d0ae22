"""Statistical utilities for erythroid-ir.

Provides the small numerical helpers shared by the reconciler and the
distribution estimator.
"""

from __future__ import annotations

from typing import Iterable, Union

import numpy as np

ArrayLike = Union[Iterable[float], np.ndarray]


def _to_clean_array(values: ArrayLike) -> np.ndarray:
    """Convert input to a float array, removing non-finite values."""
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return arr
    return arr[np.isfinite(arr)]


def sample_variance(values: ArrayLike) -> float:
    """Unbiased (ddof=1) variance ignoring non-finite values.

    Returns NaN when fewer than two finite values are available.
    """
    arr = _to_clean_array(values)
    if arr.size < 2:
        return float("nan")
    return float(np.var(arr, ddof=1))


def retention_grid(n_points: int = 1000, lower: float = 0.0, upper: float = 1.0) -> np.ndarray:
    """Evenly spaced retention levels, both endpoints included."""
    if n_points < 2:
        raise ValueError(f"n_points must be at least 2, got {n_points}")
    return np.linspace(lower, upper, n_points)


def ecdf_on_grid(values: ArrayLike, grid: np.ndarray) -> np.ndarray:
    """Evaluate the empirical CDF of values at each grid point.

    The ECDF at ``x`` is the fraction of values ``<= x``.

    Parameters
    ----------
    values : ArrayLike
        Observations. Non-finite values are dropped.
    grid : np.ndarray
        Points at which to evaluate the ECDF (any order).

    Returns
    -------
    np.ndarray
        ECDF values in [0, 1]. All NaN if there are no observations.
    """
    arr = np.sort(_to_clean_array(values))
    if arr.size == 0:
        return np.full(len(grid), np.nan)
    return np.searchsorted(arr, grid, side="right") / float(arr.size)
