"""Configuration for per-condition retention distributions."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml


@dataclass
class DistributionConfig:
    """Configuration for the distribution estimator.

    Attributes
    ----------
    n_points : int
        Number of evenly spaced retention levels on [0, 1]
    figure_upper : float
        Upper retention level of the inverse-CDF figure range
    n_workers : int
        Parallel workers across conditions (1 = sequential)
    """

    n_points: int = 1000
    figure_upper: float = 0.5
    n_workers: int = 1

    def __post_init__(self):
        if self.n_points < 2:
            raise ValueError(f"n_points must be at least 2, got {self.n_points}")
        if not 0.0 < self.figure_upper <= 1.0:
            raise ValueError(f"figure_upper must be in (0, 1], got {self.figure_upper}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DistributionConfig":
        return cls(**(data or {}))

    @classmethod
    def from_yaml(cls, path: Path) -> "DistributionConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if "distribution" in data:
            data = data["distribution"]

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "n_points": self.n_points,
            "figure_upper": self.figure_upper,
            "n_workers": self.n_workers,
        }
