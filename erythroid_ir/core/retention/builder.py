"""Retention dataset builders.

Building the retention object from raw quantification output happens in
an external analysis library. ``RetentionBuilder`` is the seam the
pipeline depends on; ``RetentionTableBuilder`` adapts an already exported
long retention table (one row per intron and sample) to that seam.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ...config import ConditionOrder
from ...exceptions import DatasetError
from ...io import read_table
from .dataset import (
    CONDITION_COL,
    INTRON_COL,
    RECORD_COLUMNS,
    SAMPLE_COL,
    UNIQUE_COUNTS_COL,
    RetentionDataset,
)

TableSource = Union[str, Path, pd.DataFrame]


class RetentionBuilder(ABC):
    """Interface for producers of a RetentionDataset."""

    @abstractmethod
    def build(self, *args, **kwargs) -> RetentionDataset:
        """Return a fully populated retention dataset."""


def _as_frame(source: Optional[TableSource], required=None) -> Optional[pd.DataFrame]:
    if source is None:
        return None
    if isinstance(source, pd.DataFrame):
        return source.copy()
    return read_table(source, required_columns=required)


class RetentionTableBuilder(RetentionBuilder):
    """Build a RetentionDataset from exported long tables.

    Parameters
    ----------
    conditions : ConditionOrder, optional
        Condition ordering. Defaults to the erythroid stages.
    logger : logging.Logger, optional
        Logger instance. If None, uses the module logger.

    Example
    -------
    >>> builder = RetentionTableBuilder()
    >>> dataset = builder.build(
    ...     "retention.tsv", samples="samples.csv", intron_genes="introns.tsv"
    ... )
    """

    def __init__(
        self,
        conditions: Optional[ConditionOrder] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.conditions = conditions or ConditionOrder()
        self.logger = logger or logging.getLogger(__name__)

    def build(
        self,
        retention: TableSource,
        samples: Optional[TableSource] = None,
        intron_genes: Optional[TableSource] = None,
    ) -> RetentionDataset:
        """Load the retention table and its metadata.

        Parameters
        ----------
        retention : path or DataFrame
            Long retention table. The ``condition`` column may be omitted
            when a sample table is given.
        samples : path or DataFrame, optional
            Sample to condition mapping (columns: sample, condition).
        intron_genes : path or DataFrame, optional
            Intron annotation (columns: intron, gene[, intron_extension]).

        Returns
        -------
        RetentionDataset

        Raises
        ------
        FileNotFoundError
            If any input file does not exist
        ValueError
            If required columns are missing
        DatasetError
            If records reference samples without a condition
        """
        sample_table = _as_frame(samples, required=[SAMPLE_COL, CONDITION_COL])
        needed = [c for c in RECORD_COLUMNS if c != CONDITION_COL or sample_table is None]
        records = _as_frame(retention, required=needed)
        introns = _as_frame(intron_genes, required=[INTRON_COL])

        if sample_table is not None:
            sample_table[SAMPLE_COL] = sample_table[SAMPLE_COL].astype(str)
            records[SAMPLE_COL] = records[SAMPLE_COL].astype(str)
            if CONDITION_COL in records.columns:
                records = records.drop(columns=[CONDITION_COL])
            records = records.merge(
                sample_table[[SAMPLE_COL, CONDITION_COL]], on=SAMPLE_COL, how="left"
            )
            unmapped = records.loc[records[CONDITION_COL].isna(), SAMPLE_COL].unique()
            if len(unmapped):
                raise DatasetError(
                    f"Samples without a condition in sample table: {sorted(unmapped)}"
                )

        dataset = RetentionDataset(
            records=records,
            samples=sample_table,
            intron_genes=introns,
            conditions=self.conditions,
        )
        dataset.unique_counts = dataset.records.pivot(
            index=INTRON_COL, columns=SAMPLE_COL, values=UNIQUE_COUNTS_COL
        )

        summary = dataset.summary()
        self.logger.info(
            "Loaded %d retention records (%d introns, %d samples)",
            summary["n_records"],
            summary["n_introns"],
            summary["n_samples"],
        )
        return dataset
