"""Analysis configuration loader.

One YAML file configures a whole run; every section is optional and
falls back to the defaults below.

Example YAML
------------
analysis:
  conditions: [pro, ebaso, lbaso, poly, ortho]
  filters:
    order: [low_tpm, perfect_psi, low_frags]
    min_tpm: 1.0
    psi_digits: 6
    min_frags: 3
  coverage_columns: [zero_coverage]
  qvalue_threshold: 0.1
  clustering:
    n_clusters: 9
    random_seed: 42
  distribution:
    n_points: 1000
    figure_upper: 0.5
  output:
    no_filter_summary: no_filter_summary.tsv
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..config import ConditionOrder
from ..core.clustering import ClusteringConfig
from ..core.coverage import DEFAULT_COVERAGE_COLUMNS
from ..core.distribution import DistributionConfig
from ..core.filtering import FilterConfig


@dataclass
class OutputConfig:
    """File names of the persisted outputs, relative to the output directory."""

    no_filter_summary: str = "no_filter_summary.tsv"
    filter_report: str = "filter_report.csv"
    retention_matrix: str = "retention_matrix.csv"
    cluster_assignments: str = "cluster_assignments.csv"
    cluster_summary: str = "cluster_summary.csv"
    cluster_profiles: str = "cluster_profiles.csv"
    distribution_curves: str = "distribution_curves.csv"
    distribution_figure: str = "distribution_figure.csv"
    manifest: str = "run_manifest.yaml"
    log_dir: str = "logs"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data or {}) - known
        if unknown:
            raise ValueError(f"Unknown output settings: {sorted(unknown)}")
        return cls(**(data or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class AnalysisConfig:
    """Complete configuration of a retention analysis run.

    Attributes
    ----------
    conditions : ConditionOrder
        Shared maturation-stage ordering
    filters : FilterConfig
        Row filter thresholds and order
    clustering : ClusteringConfig
        k-means settings and optional declared cluster sizes
    distribution : DistributionConfig
        Grid size, figure range and worker count
    output : OutputConfig
        Output file names
    coverage_columns : List[str]
        Coverage columns attached by the enricher
    qvalue_threshold : float
        Q-value cutoff reported in the run manifest
    """

    conditions: ConditionOrder = field(default_factory=ConditionOrder)
    filters: FilterConfig = field(default_factory=FilterConfig)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    distribution: DistributionConfig = field(default_factory=DistributionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    coverage_columns: List[str] = field(default_factory=lambda: list(DEFAULT_COVERAGE_COLUMNS))
    qvalue_threshold: float = 0.1

    @classmethod
    def default(cls) -> "AnalysisConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AnalysisConfig":
        """Build from a mapping; an ``analysis`` root key is optional."""
        data = dict(data or {})
        if "analysis" in data:
            data = dict(data["analysis"] or {})

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown analysis settings: {sorted(unknown)}")

        return cls(
            conditions=ConditionOrder.from_value(data.get("conditions", ConditionOrder())),
            filters=FilterConfig.from_dict(data.get("filters", {})),
            clustering=ClusteringConfig.from_dict(data.get("clustering", {})),
            distribution=DistributionConfig.from_dict(data.get("distribution", {})),
            output=OutputConfig.from_dict(data.get("output", {})),
            coverage_columns=list(data.get("coverage_columns", DEFAULT_COVERAGE_COLUMNS)),
            qvalue_threshold=float(data.get("qvalue_threshold", 0.1)),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "AnalysisConfig":
        """Load configuration from YAML file.

        Raises
        ------
        FileNotFoundError
            If the file does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (round-trips through ``from_dict``)."""
        return {
            "conditions": list(self.conditions),
            "filters": self.filters.to_dict(),
            "coverage_columns": list(self.coverage_columns),
            "qvalue_threshold": self.qvalue_threshold,
            "clustering": self.clustering.to_dict(),
            "distribution": self.distribution.to_dict(),
            "output": self.output.to_dict(),
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump({"analysis": self.to_dict()}, sort_keys=False)
