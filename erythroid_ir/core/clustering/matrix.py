"""Complete-case retention matrix (introns x conditions)."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import pandas as pd

from ...config import ConditionOrder
from ..reconcile import FILLED_COL
from ..retention import CONDITION_COL, INTRON_COL, PAIR_KEY
from ..testing import MEAN_COL


@dataclass
class MatrixResult:
    """Retention matrix and what was left out of it.

    Attributes
    ----------
    matrix : pd.DataFrame
        Introns (index) x conditions (columns, stage order); no missing values
    n_introns_total : int
        Introns present in the input table
    excluded_introns : List[str]
        Introns dropped because at least one condition had no value
    """

    matrix: pd.DataFrame
    n_introns_total: int = 0
    excluded_introns: List[str] = field(default_factory=list)

    @property
    def n_excluded(self) -> int:
        return len(self.excluded_introns)


class MatrixBuilder:
    """Pivot per-(intron, condition) mean retention into a matrix.

    Only introns with a value in every configured condition are kept;
    incomplete introns are excluded, not imputed. When the table carries
    the reconciler's ``filled`` flag, filled pairs count as missing: an
    intron the tester rejected in any condition is left out even though
    its mean was filled from raw values.

    Parameters
    ----------
    conditions : ConditionOrder, optional
        Matrix columns, in order
    value_col : str
        Column holding the per-pair value (default: mean_retention)
    tested_only : bool
        Treat rows flagged as filled as missing (default: True)
    logger : logging.Logger, optional
        Logger instance. If None, uses the module logger.
    """

    def __init__(
        self,
        conditions: Optional[ConditionOrder] = None,
        value_col: str = MEAN_COL,
        tested_only: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.conditions = conditions or ConditionOrder()
        self.value_col = value_col
        self.tested_only = tested_only
        self.logger = logger or logging.getLogger(__name__)

    def build(self, table: pd.DataFrame) -> MatrixResult:
        """Build the complete-case matrix from a long table.

        Parameters
        ----------
        table : pd.DataFrame
            Reconciled records or the no-filter summary; must contain
            intron, condition and the value column. Repeated rows for the
            same pair (one per sample) carry the same value; the first
            non-missing one is used. Every intron in the table counts
            toward the total, so introns with no usable value are listed
            as excluded.

        Returns
        -------
        MatrixResult
        """
        columns = list(self.conditions)
        pairs = table[PAIR_KEY + [self.value_col]].copy()
        if self.tested_only and FILLED_COL in table.columns:
            pairs.loc[table[FILLED_COL].fillna(False).astype(bool), self.value_col] = np.nan
        pairs[INTRON_COL] = pairs[INTRON_COL].astype(str)
        pairs[CONDITION_COL] = pairs[CONDITION_COL].astype(str)
        pairs = pairs.dropna(subset=[self.value_col]).drop_duplicates(subset=PAIR_KEY)

        all_introns = sorted(table[INTRON_COL].astype(str).unique())
        wide = pairs.pivot(index=INTRON_COL, columns=CONDITION_COL, values=self.value_col)
        wide = wide.reindex(index=all_introns, columns=columns).astype(float)
        wide.columns.name = CONDITION_COL
        wide.index.name = INTRON_COL

        complete = wide.notna().all(axis=1)
        result = MatrixResult(
            matrix=wide.loc[complete].copy(),
            n_introns_total=len(all_introns),
            excluded_introns=wide.index[~complete].tolist(),
        )

        self.logger.info(
            "Retention matrix: %d complete introns x %d conditions (%d incomplete excluded)",
            len(result.matrix),
            len(columns),
            result.n_excluded,
        )
        return result
