"""Row filter chain for retention datasets.

Each filter is a predicate over the per-(intron, sample) rows. Filters are
applied strictly in declared order because later filters see the rows that
earlier ones left behind. An empty dataset is a valid outcome and is passed
on unchanged to the next stage.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..retention import (
    FRAGS_COL,
    INTRON_COL,
    RETENTION_COL,
    TPM_COL,
    RetentionDataset,
)
from .config import (
    LOW_FRAGS,
    LOW_TPM,
    PERFECT_PSI,
    ZERO_COVERAGE,
    FilterConfig,
)

Predicate = Callable[[pd.DataFrame], pd.Series]


def low_tpm_predicate(min_tpm: float) -> Predicate:
    """Keep rows with ``tpm >= min_tpm``."""

    def keep(records: pd.DataFrame) -> pd.Series:
        return records[TPM_COL] >= min_tpm

    return keep


def perfect_psi_predicate(digits: int) -> Predicate:
    """Keep rows whose retention, rounded to ``digits``, is strictly inside (0, 1)."""

    def keep(records: pd.DataFrame) -> pd.Series:
        rounded = np.round(records[RETENTION_COL].astype(float), digits)
        return (rounded > 0) & (rounded < 1)

    return keep


def low_frags_predicate(min_frags: float) -> Predicate:
    """Keep rows supported by at least ``min_frags`` fragments."""

    def keep(records: pd.DataFrame) -> pd.Series:
        return records[FRAGS_COL] >= min_frags

    return keep


def zero_coverage_predicate(max_zero_coverage: float, column: str) -> Predicate:
    """Keep rows whose zero-coverage statistic does not exceed the maximum."""

    def keep(records: pd.DataFrame) -> pd.Series:
        if column not in records.columns:
            raise KeyError(
                f"Zero-coverage filter needs column '{column}'; "
                "run coverage enrichment first"
            )
        return records[column] <= max_zero_coverage

    return keep


@dataclass
class FilterSpec:
    """A named row predicate."""

    name: str
    predicate: Predicate
    description: str = ""


@dataclass
class FilterStepResult:
    """Report for one filter application.

    Attributes
    ----------
    name : str
        Filter name
    rows_before : int
        Rows entering the filter
    rows_after : int
        Rows surviving the filter
    introns_before : int
        Distinct introns entering the filter
    introns_after : int
        Distinct introns surviving the filter
    """

    name: str
    rows_before: int = 0
    rows_after: int = 0
    introns_before: int = 0
    introns_after: int = 0

    @property
    def rows_removed(self) -> int:
        return self.rows_before - self.rows_after

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "filter": self.name,
            "rows_before": self.rows_before,
            "rows_after": self.rows_after,
            "rows_removed": self.rows_removed,
            "introns_before": self.introns_before,
            "introns_after": self.introns_after,
        }


@dataclass
class FilterChainResult:
    """Outcome of running a filter chain.

    Attributes
    ----------
    dataset : RetentionDataset
        Dataset after the last filter
    steps : List[FilterStepResult]
        One report per applied filter, in order
    """

    dataset: RetentionDataset
    steps: List[FilterStepResult] = field(default_factory=list)

    def to_frame(self) -> pd.DataFrame:
        """Filter report table (one row per step)."""
        return pd.DataFrame(
            [s.to_dict() for s in self.steps],
            columns=[
                "filter",
                "rows_before",
                "rows_after",
                "rows_removed",
                "introns_before",
                "introns_after",
            ],
        )


def build_filter_specs(config: FilterConfig, names: Sequence[str]) -> List[FilterSpec]:
    """Resolve filter names from the config into FilterSpecs.

    Raises
    ------
    ValueError
        If a name is unknown or the zero-coverage filter has no maximum
    """
    specs = []
    for name in names:
        if name == LOW_TPM:
            specs.append(FilterSpec(
                name, low_tpm_predicate(config.min_tpm), f"tpm >= {config.min_tpm}"
            ))
        elif name == PERFECT_PSI:
            specs.append(FilterSpec(
                name,
                perfect_psi_predicate(config.psi_digits),
                f"0 < round(retention, {config.psi_digits}) < 1",
            ))
        elif name == LOW_FRAGS:
            specs.append(FilterSpec(
                name, low_frags_predicate(config.min_frags), f"frags >= {config.min_frags}"
            ))
        elif name == ZERO_COVERAGE:
            if config.max_zero_coverage is None:
                raise ValueError("zero_coverage filter requires max_zero_coverage")
            specs.append(FilterSpec(
                name,
                zero_coverage_predicate(config.max_zero_coverage, config.zero_coverage_col),
                f"{config.zero_coverage_col} <= {config.max_zero_coverage}",
            ))
        else:
            raise ValueError(
                f"Unknown filter '{name}'. "
                f"Available: {[LOW_TPM, PERFECT_PSI, LOW_FRAGS, ZERO_COVERAGE]}"
            )
    return specs


class FilterChain:
    """Apply an ordered sequence of row filters to a RetentionDataset.

    Parameters
    ----------
    filters : Sequence[FilterSpec]
        Filters in application order
    logger : logging.Logger, optional
        Logger instance. If None, uses the module logger.

    Example
    -------
    >>> chain = FilterChain.from_config(FilterConfig(min_tpm=1, min_frags=3))
    >>> result = chain.apply(dataset)
    >>> result.dataset.n_records, result.to_frame()
    """

    def __init__(
        self,
        filters: Sequence[FilterSpec],
        logger: Optional[logging.Logger] = None,
    ):
        self.filters = list(filters)
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(
        cls,
        config: Optional[FilterConfig] = None,
        names: Optional[Sequence[str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "FilterChain":
        """Build a chain from config; ``names`` overrides ``config.order``."""
        config = config or FilterConfig()
        names = config.order if names is None else names
        return cls(build_filter_specs(config, names), logger=logger)

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.filters]

    def apply(self, dataset: RetentionDataset) -> FilterChainResult:
        """Run every filter in order and return the final dataset with reports."""
        result = FilterChainResult(dataset=dataset.copy())

        for spec in self.filters:
            current = result.dataset
            records = current.records
            step = FilterStepResult(
                name=spec.name,
                rows_before=len(records),
                introns_before=int(records[INTRON_COL].nunique()),
            )

            if records.empty:
                filtered = current
            else:
                mask = spec.predicate(records).fillna(False).astype(bool)
                filtered = current.filter_rows(mask)

            step.rows_after = filtered.n_records
            step.introns_after = filtered.n_introns
            result.steps.append(step)
            result.dataset = filtered

            self.logger.info(
                "Filter %s (%s): %d -> %d rows (%d removed), %d -> %d introns",
                spec.name,
                spec.description or "custom",
                step.rows_before,
                step.rows_after,
                step.rows_removed,
                step.introns_before,
                step.introns_after,
            )

        if result.dataset.is_empty and self.filters:
            self.logger.warning("Filter chain removed all retention records")

        return result
