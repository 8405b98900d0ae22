"""Per-intron, per-sample retention dataset.

A ``RetentionDataset`` bundles the long retention table with the
sample-to-condition metadata and the intron annotation (gene and extended
intron identifier). Every transformation returns a new dataset built from
copies, so a stage never mutates the frame handed to it by the previous
stage.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ...config import ConditionOrder
from ...exceptions import DatasetError


INTRON_COL = "intron"
SAMPLE_COL = "sample"
CONDITION_COL = "condition"
TPM_COL = "tpm"
RETENTION_COL = "retention"
FRAGS_COL = "frags"
UNIQUE_COUNTS_COL = "unique_counts"
GENE_COL = "gene"
EXTENSION_COL = "intron_extension"

RECORD_COLUMNS = [
    INTRON_COL,
    SAMPLE_COL,
    CONDITION_COL,
    TPM_COL,
    RETENTION_COL,
    FRAGS_COL,
    UNIQUE_COUNTS_COL,
]
RECORD_KEY = [INTRON_COL, SAMPLE_COL]
PAIR_KEY = [INTRON_COL, CONDITION_COL]


@dataclass
class RetentionDataset:
    """Retention measurements with sample and intron metadata.

    Attributes
    ----------
    records : pd.DataFrame
        One row per (intron, sample) with RECORD_COLUMNS plus any attached
        columns (e.g. zero-coverage statistics)
    samples : pd.DataFrame
        Sample to condition mapping (columns: sample, condition)
    intron_genes : pd.DataFrame
        Intron annotation (columns: intron, gene, intron_extension)
    conditions : ConditionOrder
        Shared condition ordering
    unique_counts : pd.DataFrame, optional
        Unique-read count metadata returned by the builder
    """

    records: pd.DataFrame
    samples: pd.DataFrame
    intron_genes: pd.DataFrame
    conditions: ConditionOrder = field(default_factory=ConditionOrder)
    unique_counts: Optional[pd.DataFrame] = None

    def __post_init__(self):
        self.records = self._normalize_records(self.records)
        self.samples = self._normalize_samples(self.samples)
        self.intron_genes = self._normalize_introns(self.intron_genes)

    def _normalize_records(self, records: pd.DataFrame) -> pd.DataFrame:
        missing = [c for c in RECORD_COLUMNS if c not in records.columns]
        if missing:
            raise DatasetError(f"Retention records missing columns: {missing}")

        records = records.reset_index(drop=True).copy()
        records[INTRON_COL] = records[INTRON_COL].astype(str)
        records[SAMPLE_COL] = records[SAMPLE_COL].astype(str)
        try:
            records[CONDITION_COL] = self.conditions.categorical(records[CONDITION_COL])
        except ValueError as exc:
            raise DatasetError(str(exc)) from exc
        for col in (TPM_COL, RETENTION_COL, FRAGS_COL, UNIQUE_COUNTS_COL):
            records[col] = pd.to_numeric(records[col], errors="coerce")

        duplicated = records.duplicated(subset=RECORD_KEY, keep=False)
        if duplicated.any():
            examples = (
                records.loc[duplicated, RECORD_KEY]
                .drop_duplicates()
                .head(5)
                .itertuples(index=False, name=None)
            )
            raise DatasetError(
                f"Duplicate (intron, sample) pairs in retention records "
                f"({int(duplicated.sum())} rows), e.g. {list(examples)}"
            )
        return records

    def _normalize_samples(self, samples: pd.DataFrame) -> pd.DataFrame:
        if samples is None or samples.empty:
            samples = self.records[[SAMPLE_COL, CONDITION_COL]].drop_duplicates()
        missing = [c for c in (SAMPLE_COL, CONDITION_COL) if c not in samples.columns]
        if missing:
            raise DatasetError(f"Sample table missing columns: {missing}")

        samples = samples[[SAMPLE_COL, CONDITION_COL]].drop_duplicates().copy()
        samples[SAMPLE_COL] = samples[SAMPLE_COL].astype(str)
        if samples[SAMPLE_COL].duplicated().any():
            raise DatasetError("Sample table maps a sample to more than one condition")
        try:
            samples[CONDITION_COL] = self.conditions.categorical(samples[CONDITION_COL])
        except ValueError as exc:
            raise DatasetError(str(exc)) from exc
        return samples.sort_values([CONDITION_COL, SAMPLE_COL]).reset_index(drop=True)

    def _normalize_introns(self, intron_genes: pd.DataFrame) -> pd.DataFrame:
        if intron_genes is None or intron_genes.empty:
            intron_genes = pd.DataFrame({INTRON_COL: self.records[INTRON_COL].unique()})
        if INTRON_COL not in intron_genes.columns:
            raise DatasetError(f"Intron annotation missing column: {INTRON_COL}")

        intron_genes = intron_genes.copy()
        intron_genes[INTRON_COL] = intron_genes[INTRON_COL].astype(str)
        if GENE_COL not in intron_genes.columns:
            intron_genes[GENE_COL] = pd.NA
        if EXTENSION_COL not in intron_genes.columns:
            intron_genes[EXTENSION_COL] = intron_genes[INTRON_COL]
        intron_genes = intron_genes[[INTRON_COL, GENE_COL, EXTENSION_COL]]
        return intron_genes.drop_duplicates(subset=INTRON_COL).reset_index(drop=True)

    @property
    def n_records(self) -> int:
        """Number of (intron, sample) rows."""
        return len(self.records)

    @property
    def n_introns(self) -> int:
        """Number of distinct introns with at least one record."""
        return int(self.records[INTRON_COL].nunique())

    @property
    def is_empty(self) -> bool:
        return self.records.empty

    @property
    def extra_columns(self) -> List[str]:
        """Columns attached to the records beyond RECORD_COLUMNS."""
        return [c for c in self.records.columns if c not in RECORD_COLUMNS]

    def with_records(self, records: pd.DataFrame) -> "RetentionDataset":
        """Return a new dataset sharing metadata copies but with new records."""
        return RetentionDataset(
            records=records.copy(),
            samples=self.samples.copy(),
            intron_genes=self.intron_genes.copy(),
            conditions=self.conditions,
            unique_counts=None if self.unique_counts is None else self.unique_counts.copy(),
        )

    def copy(self) -> "RetentionDataset":
        return self.with_records(self.records)

    def filter_rows(self, mask: pd.Series) -> "RetentionDataset":
        """Return a new dataset keeping only rows where mask is True."""
        mask = pd.Series(mask, index=self.records.index).fillna(False).astype(bool)
        return self.with_records(self.records.loc[mask])

    def summary(self) -> Dict[str, Any]:
        """Counts for logging and the run manifest."""
        per_condition = (
            self.records.groupby(CONDITION_COL, observed=False)[SAMPLE_COL]
            .size()
            .to_dict()
        )
        return {
            "n_records": self.n_records,
            "n_introns": self.n_introns,
            "n_samples": int(self.records[SAMPLE_COL].nunique()),
            "records_per_condition": {str(k): int(v) for k, v in per_condition.items()},
        }
