"""Clustering module for intron retention patterns.

Builds the complete-case intron x condition matrix of mean retention and
partitions it with k-means into size-ranked clusters.

Example Usage
-------------
>>> from erythroid_ir.core.clustering import (
...     ClusterEngine, ClusteringConfig, MatrixBuilder,
... )
>>> matrix = MatrixBuilder().build(summary).matrix
>>> engine = ClusterEngine(ClusteringConfig(n_clusters=9, random_seed=42))
>>> result = engine.run_clustering(matrix)
>>> result.assignments.head()
"""

# Configuration classes
from .config import ClusteringConfig

# Matrix construction
from .matrix import (
    MatrixBuilder,
    MatrixResult,
)

# Clustering engine
from .engine import (
    ASSIGNMENT_COLUMNS,
    CLUSTER_COL,
    LABEL_COL,
    SIZE_COL,
    ClusterEngine,
    ClusteringResult,
    assign_size_labels,
)

__all__ = [
    # Config
    "ClusteringConfig",
    # Matrix
    "MatrixBuilder",
    "MatrixResult",
    # Engine
    "ASSIGNMENT_COLUMNS",
    "CLUSTER_COL",
    "LABEL_COL",
    "SIZE_COL",
    "ClusterEngine",
    "ClusteringResult",
    "assign_size_labels",
]
