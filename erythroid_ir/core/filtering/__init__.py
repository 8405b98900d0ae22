"""Filtering module for retention datasets.

Pipeline Stages
---------------
- Low abundance: drop rows with TPM below a threshold
- Perfect PSI: drop rows whose retention rounds to exactly 0 or 1
- Low support: drop rows with too few supporting fragments
- Zero coverage (after enrichment): drop rows with too many uncovered bases

Example Usage
-------------
>>> from erythroid_ir.core.filtering import FilterChain, FilterConfig
>>> chain = FilterChain.from_config(FilterConfig(min_tpm=1.0, min_frags=3))
>>> result = chain.apply(dataset)
>>> result.to_frame()
"""

from .config import (
    DEFAULT_FILTER_ORDER,
    LOW_FRAGS,
    LOW_TPM,
    PERFECT_PSI,
    ZERO_COVERAGE,
    FilterConfig,
)
from .chain import (
    FilterChain,
    FilterChainResult,
    FilterSpec,
    FilterStepResult,
    build_filter_specs,
    low_frags_predicate,
    low_tpm_predicate,
    perfect_psi_predicate,
    zero_coverage_predicate,
)

__all__ = [
    # Config
    "DEFAULT_FILTER_ORDER",
    "LOW_FRAGS",
    "LOW_TPM",
    "PERFECT_PSI",
    "ZERO_COVERAGE",
    "FilterConfig",
    # Chain
    "FilterChain",
    "FilterChainResult",
    "FilterSpec",
    "FilterStepResult",
    "build_filter_specs",
    "low_frags_predicate",
    "low_tpm_predicate",
    "perfect_psi_predicate",
    "zero_coverage_predicate",
]
