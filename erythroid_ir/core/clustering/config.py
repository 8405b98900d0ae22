"""Configuration classes for retention-pattern clustering.

All clustering parameters are configurable via YAML.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class ClusteringConfig:
    """Configuration for k-means clustering of the retention matrix.

    Attributes
    ----------
    n_clusters : int
        Number of retention-pattern clusters
    random_seed : int
        Seed for k-means initialization; the same seed and matrix always
        give the same partition
    max_iter : int
        Iteration cap for a single k-means run
    n_init : int
        Number of random restarts; the run with the lowest total
        within-cluster sum of squares is kept
    expected_sizes : List[int], optional
        Curated cluster sizes from a reference run. When set, the observed
        size multiset must match exactly; otherwise labels are assigned
        by size rank.
    label_prefix : str
        Prefix of the size-rank labels ("C" gives C1..C9)
    """

    n_clusters: int = 9
    random_seed: int = 42
    max_iter: int = 100
    n_init: int = 25
    expected_sizes: Optional[List[int]] = None
    label_prefix: str = "C"

    def __post_init__(self):
        if self.n_clusters < 1:
            raise ValueError(f"n_clusters must be positive, got {self.n_clusters}")
        if self.expected_sizes is not None:
            self.expected_sizes = [int(s) for s in self.expected_sizes]
            if len(self.expected_sizes) != self.n_clusters:
                raise ValueError(
                    f"expected_sizes has {len(self.expected_sizes)} entries "
                    f"but n_clusters is {self.n_clusters}"
                )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusteringConfig":
        return cls(**(data or {}))

    @classmethod
    def from_yaml(cls, path: Path) -> "ClusteringConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if "clustering" in data:
            data = data["clustering"]

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "n_clusters": self.n_clusters,
            "random_seed": self.random_seed,
            "max_iter": self.max_iter,
            "n_init": self.n_init,
            "expected_sizes": None if self.expected_sizes is None else list(self.expected_sizes),
            "label_prefix": self.label_prefix,
        }
