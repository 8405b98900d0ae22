"""Zero-coverage enrichment of retention datasets.

Zero-coverage statistics (per intron and sample, e.g. the number of intron
bases with no read coverage) are computed outside this package. The
enricher attaches them to the retention records without adding or
removing rows.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import pandas as pd

from ...exceptions import MergeError
from ...io import read_table
from ..retention import INTRON_COL, RECORD_COLUMNS, RECORD_KEY, SAMPLE_COL, RetentionDataset

DEFAULT_COVERAGE_COLUMNS = ["zero_coverage"]


def load_coverage_summary(
    path: Union[str, Path],
    value_columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Read a zero-coverage table keyed by (intron, sample).

    Parameters
    ----------
    path : str or Path
        CSV/TSV with columns ``intron``, ``sample`` and the coverage columns
    value_columns : Sequence[str], optional
        Coverage columns to require. Defaults to ``["zero_coverage"]``.

    Returns
    -------
    pd.DataFrame
        Coverage summary with string keys

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If required columns are missing
    """
    value_columns = list(value_columns or DEFAULT_COVERAGE_COLUMNS)
    df = read_table(path, required_columns=RECORD_KEY + value_columns)
    df[INTRON_COL] = df[INTRON_COL].astype(str)
    df[SAMPLE_COL] = df[SAMPLE_COL].astype(str)
    return df


class CoverageEnricher:
    """Attach coverage columns to a RetentionDataset.

    Parameters
    ----------
    value_columns : Sequence[str], optional
        Coverage columns to attach. If None, every non-key column of the
        coverage summary is attached.
    logger : logging.Logger, optional
        Logger instance. If None, uses the module logger.

    Example
    -------
    >>> enricher = CoverageEnricher()
    >>> enriched = enricher.enrich(dataset, load_coverage_summary("zc.tsv"))
    """

    def __init__(
        self,
        value_columns: Optional[Sequence[str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.value_columns = list(value_columns) if value_columns else None
        self.logger = logger or logging.getLogger(__name__)

    def _coverage_columns(self, coverage: pd.DataFrame) -> List[str]:
        if self.value_columns is not None:
            missing = [c for c in self.value_columns if c not in coverage.columns]
            if missing:
                raise MergeError(f"Coverage summary missing columns: {missing}")
            return self.value_columns
        return [c for c in coverage.columns if c not in RECORD_KEY]

    def enrich(self, dataset: RetentionDataset, coverage: pd.DataFrame) -> RetentionDataset:
        """Left-join coverage statistics onto every record.

        Parameters
        ----------
        dataset : RetentionDataset
            Dataset to enrich (not modified)
        coverage : pd.DataFrame
            Coverage summary keyed by (intron, sample)

        Returns
        -------
        RetentionDataset
            New dataset with the coverage columns attached

        Raises
        ------
        MergeError
            If the coverage table has duplicate keys, or any record has no
            matching coverage entry
        """
        missing_keys = [c for c in RECORD_KEY if c not in coverage.columns]
        if missing_keys:
            raise MergeError(f"Coverage summary missing key columns: {missing_keys}")

        value_cols = self._coverage_columns(coverage)
        clashing = [c for c in value_cols if c in RECORD_COLUMNS]
        if clashing:
            raise MergeError(f"Coverage columns clash with record columns: {clashing}")

        table = coverage[RECORD_KEY + value_cols].copy()
        table[INTRON_COL] = table[INTRON_COL].astype(str)
        table[SAMPLE_COL] = table[SAMPLE_COL].astype(str)
        if table.duplicated(subset=RECORD_KEY).any():
            n_dup = int(table.duplicated(subset=RECORD_KEY).sum())
            raise MergeError(f"Coverage summary has {n_dup} duplicate (intron, sample) keys")

        # Replace previously attached coverage values rather than suffixing them
        records = dataset.records.drop(
            columns=[c for c in value_cols if c in dataset.records.columns]
        )
        merged = records.merge(table, on=RECORD_KEY, how="left", indicator=True)

        unmatched = merged["_merge"] == "left_only"
        if unmatched.any():
            examples = list(
                merged.loc[unmatched, RECORD_KEY].head(5).itertuples(index=False, name=None)
            )
            raise MergeError(
                f"{int(unmatched.sum())} retention records have no coverage entry, "
                f"e.g. {examples}"
            )

        merged = merged.drop(columns=["_merge"])
        self.logger.info(
            "Attached coverage columns %s to %d records", value_cols, len(merged)
        )
        return dataset.with_records(merged)
