"""Reconcile retention test output with per-sample retention values.

The external tester only reports (intron, condition) pairs that pass its
admissibility filters. The reconciler left-joins the per-sample records
with those results and fills ``mean_retention`` and ``var_retention`` for
the remaining pairs from the raw retention values, so every measured pair
carries summary statistics. P- and q-values are never synthesized and stay
missing for pairs the tester did not report.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from ...config import ConditionOrder
from ...utils.stats import sample_variance
from ..retention import (
    CONDITION_COL,
    EXTENSION_COL,
    GENE_COL,
    INTRON_COL,
    PAIR_KEY,
    RETENTION_COL,
    RetentionDataset,
)
from ..testing import (
    MEAN_COL,
    PVALUE_COL,
    QVALUE_COL,
    STAT_COLUMNS,
    VAR_COL,
)

FILLED_COL = "filled"

SUMMARY_COLUMNS = [
    INTRON_COL,
    CONDITION_COL,
    MEAN_COL,
    VAR_COL,
    PVALUE_COL,
    QVALUE_COL,
    GENE_COL,
    EXTENSION_COL,
]


class ResultReconciler:
    """Join test results onto retention records and fill missing summaries.

    Parameters
    ----------
    conditions : ConditionOrder, optional
        Condition ordering used to sort the summary table
    logger : logging.Logger, optional
        Logger instance. If None, uses the module logger.

    Example
    -------
    >>> reconciler = ResultReconciler()
    >>> joined = reconciler.join(dataset, test_results)
    >>> reconciled = reconciler.reconcile(joined)
    >>> summary = reconciler.no_filter_summary(reconciled)
    """

    def __init__(
        self,
        conditions: Optional[ConditionOrder] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.conditions = conditions or ConditionOrder()
        self.logger = logger or logging.getLogger(__name__)

    def join(self, dataset: RetentionDataset, test_results: pd.DataFrame) -> pd.DataFrame:
        """Left-join test results onto the dataset records.

        The dataset is the driving side: every record is kept, pairs
        without a test result get missing statistics. Gene and extended
        intron identifiers are attached from the intron annotation.
        """
        records = dataset.records.copy()
        results = test_results.copy()
        results[INTRON_COL] = results[INTRON_COL].astype(str)
        results[CONDITION_COL] = results[CONDITION_COL].astype(str)

        records[CONDITION_COL] = records[CONDITION_COL].astype(str)
        stat_cols = [c for c in STAT_COLUMNS if c in results.columns]
        joined = records.drop(
            columns=[c for c in stat_cols if c in records.columns]
        ).merge(results[PAIR_KEY + stat_cols], on=PAIR_KEY, how="left")
        for col in STAT_COLUMNS:
            if col not in joined.columns:
                joined[col] = np.nan
            joined[col] = pd.to_numeric(joined[col], errors="coerce")

        annotation = dataset.intron_genes
        joined = joined.drop(
            columns=[c for c in (GENE_COL, EXTENSION_COL) if c in joined.columns]
        ).merge(annotation, on=INTRON_COL, how="left")
        joined[EXTENSION_COL] = joined[EXTENSION_COL].fillna(joined[INTRON_COL])
        joined[CONDITION_COL] = self.conditions.categorical(joined[CONDITION_COL])

        n_pairs = joined[PAIR_KEY].drop_duplicates().shape[0]
        n_tested = joined.loc[joined[MEAN_COL].notna(), PAIR_KEY].drop_duplicates().shape[0]
        self.logger.info(
            "Joined %d records (%d intron/condition pairs, %d with test results)",
            len(joined),
            n_pairs,
            n_tested,
        )
        return joined

    def reconcile(self, joined: pd.DataFrame) -> pd.DataFrame:
        """Fill missing mean/variance from the raw per-sample retention values.

        For each (intron, condition) group whose ``mean_retention`` is
        missing, the mean is the arithmetic mean of the group's retention
        values and the variance their sample variance (ddof=1; 0.0 for
        single-sample groups so the column is never missing). All rows of
        the group are used. A missing variance is filled the same way even
        when the tester reported a mean. The ``filled`` flag marks pairs
        whose mean was filled. P- and q-values are left untouched. Running
        this twice is a no-op.

        Parameters
        ----------
        joined : pd.DataFrame
            Output of ``join`` (or a previous ``reconcile``)

        Returns
        -------
        pd.DataFrame
            Copy with filled statistics and a boolean ``filled`` column
        """
        reconciled = joined.copy()
        if reconciled.empty:
            if FILLED_COL not in reconciled.columns:
                reconciled[FILLED_COL] = pd.Series(dtype=bool)
            return reconciled

        groups = reconciled.groupby(PAIR_KEY, observed=True, sort=False)[RETENTION_COL]
        raw_mean = groups.transform("mean")
        raw_var = groups.transform(lambda s: sample_variance(s) if s.count() > 1 else 0.0)

        needs_mean = reconciled[MEAN_COL].isna()
        needs_var = reconciled[VAR_COL].isna()
        previously_filled = (
            reconciled[FILLED_COL].fillna(False).astype(bool)
            if FILLED_COL in reconciled.columns
            else pd.Series(False, index=reconciled.index)
        )

        reconciled.loc[needs_mean, MEAN_COL] = raw_mean[needs_mean]
        reconciled.loc[needs_var, VAR_COL] = raw_var[needs_var]
        reconciled[FILLED_COL] = previously_filled | needs_mean

        n_filled = reconciled.loc[needs_mean, PAIR_KEY].drop_duplicates().shape[0]
        if n_filled:
            self.logger.info(
                "Filled mean/variance for %d intron/condition pairs without test results",
                n_filled,
            )
        n_var_only = reconciled.loc[needs_var & ~needs_mean, PAIR_KEY].drop_duplicates().shape[0]
        if n_var_only:
            self.logger.info(
                "Filled variance for %d tested pairs reported without one", n_var_only
            )
        return reconciled

    def no_filter_summary(self, reconciled: pd.DataFrame) -> pd.DataFrame:
        """One row per (intron, condition) with statistics and annotation.

        Duplicate rows (one per sample before this collapse) are dropped
        and rows are sorted by extended intron identifier, then by the
        condition's position in the stage ordering.
        """
        summary = reconciled[SUMMARY_COLUMNS].copy()
        summary[CONDITION_COL] = summary[CONDITION_COL].astype(str)
        summary = summary.drop_duplicates()

        summary["_order"] = summary[CONDITION_COL].map(self.conditions.position)
        summary = summary.sort_values(
            [EXTENSION_COL, "_order"], kind="mergesort"
        ).drop(columns=["_order"])
        summary[CONDITION_COL] = self.conditions.categorical(summary[CONDITION_COL])
        return summary.reset_index(drop=True)


def significant_introns(summary: pd.DataFrame, qvalue_threshold: float = 0.1) -> pd.DataFrame:
    """Rows of the summary with ``qvalue <= qvalue_threshold``.

    Pairs without a test result (missing q-value) are never significant.
    """
    mask = summary[QVALUE_COL].notna() & (summary[QVALUE_COL] <= qvalue_threshold)
    return summary.loc[mask].reset_index(drop=True)
