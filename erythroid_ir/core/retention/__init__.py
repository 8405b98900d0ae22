"""Retention dataset model and builders.

Example Usage
-------------
>>> from erythroid_ir.core.retention import RetentionTableBuilder
>>> dataset = RetentionTableBuilder().build("retention.tsv", samples="samples.csv")
>>> dataset.summary()["n_introns"]
"""

from .dataset import (
    CONDITION_COL,
    EXTENSION_COL,
    FRAGS_COL,
    GENE_COL,
    INTRON_COL,
    PAIR_KEY,
    RECORD_COLUMNS,
    RECORD_KEY,
    RETENTION_COL,
    SAMPLE_COL,
    TPM_COL,
    UNIQUE_COUNTS_COL,
    RetentionDataset,
)
from .builder import (
    RetentionBuilder,
    RetentionTableBuilder,
)

__all__ = [
    # Columns
    "CONDITION_COL",
    "EXTENSION_COL",
    "FRAGS_COL",
    "GENE_COL",
    "INTRON_COL",
    "PAIR_KEY",
    "RECORD_COLUMNS",
    "RECORD_KEY",
    "RETENTION_COL",
    "SAMPLE_COL",
    "TPM_COL",
    "UNIQUE_COUNTS_COL",
    # Dataset
    "RetentionDataset",
    # Builders
    "RetentionBuilder",
    "RetentionTableBuilder",
]
