"""Configuration for the retention filter chain.

All thresholds are configurable via YAML.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


LOW_TPM = "low_tpm"
PERFECT_PSI = "perfect_psi"
LOW_FRAGS = "low_frags"
ZERO_COVERAGE = "zero_coverage"

DEFAULT_FILTER_ORDER = [LOW_TPM, PERFECT_PSI, LOW_FRAGS]


@dataclass
class FilterConfig:
    """Configuration for row filters.

    Attributes
    ----------
    order : List[str]
        Filters to apply, in order
    min_tpm : float
        Rows with TPM below this value are dropped
    psi_digits : int
        Decimal precision used to decide whether retention is exactly 0 or 1
    min_frags : int
        Rows with fewer supporting fragments are dropped
    max_zero_coverage : float, optional
        Rows whose zero-coverage statistic exceeds this value are dropped.
        Only used when ``zero_coverage`` is listed in ``post_coverage_order``.
    zero_coverage_col : str
        Coverage column inspected by the zero-coverage filter
    post_coverage_order : List[str]
        Filters applied after coverage enrichment
    """

    order: List[str] = field(default_factory=lambda: list(DEFAULT_FILTER_ORDER))
    min_tpm: float = 1.0
    psi_digits: int = 6
    min_frags: int = 3
    max_zero_coverage: Optional[float] = None
    zero_coverage_col: str = "zero_coverage"
    post_coverage_order: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterConfig":
        return cls(**(data or {}))

    @classmethod
    def from_yaml(cls, path: Path) -> "FilterConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if "filters" in data:
            data = data["filters"]

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "order": list(self.order),
            "min_tpm": self.min_tpm,
            "psi_digits": self.psi_digits,
            "min_frags": self.min_frags,
            "max_zero_coverage": self.max_zero_coverage,
            "zero_coverage_col": self.zero_coverage_col,
            "post_coverage_order": list(self.post_coverage_order),
        }
