"""Clustering engine for intron retention patterns.

Partitions the complete-case retention matrix into a fixed number of
clusters with k-means and gives every cluster a stable size-rank label
(C1 = smallest cluster).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.cluster import KMeans

from ...exceptions import LabelMismatchError
from ..retention import CONDITION_COL, INTRON_COL
from .config import ClusteringConfig


CLUSTER_COL = "cluster"
SIZE_COL = "cluster_size"
LABEL_COL = "cluster_label"

ASSIGNMENT_COLUMNS = [INTRON_COL, CLUSTER_COL, SIZE_COL, LABEL_COL]


def assign_size_labels(
    cluster_sizes: Dict[int, int],
    expected_sizes: Optional[Sequence[int]] = None,
    prefix: str = "C",
) -> Dict[int, str]:
    """Map cluster ids to size-rank labels.

    Clusters are ranked by ascending size (ties broken by cluster id) and
    labelled ``{prefix}1`` .. ``{prefix}k``.

    Parameters
    ----------
    cluster_sizes : Dict[int, int]
        Map of cluster id to number of introns
    expected_sizes : Sequence[int], optional
        Curated sizes from a reference run, in any order. When given, the
        observed sizes must be exactly this multiset.
    prefix : str
        Label prefix

    Returns
    -------
    Dict[int, str]
        Map of cluster id to label

    Raises
    ------
    LabelMismatchError
        If expected_sizes is given and does not match the observed sizes
    """
    ranked = sorted(cluster_sizes.items(), key=lambda item: (item[1], item[0]))

    if expected_sizes is not None:
        observed = [size for _, size in ranked]
        expected = sorted(int(s) for s in expected_sizes)
        if observed != expected:
            raise LabelMismatchError(
                f"Observed cluster sizes {observed} do not match declared sizes "
                f"{expected}; the declared size list is stale for this input"
            )

    return {cluster: f"{prefix}{rank}" for rank, (cluster, _) in enumerate(ranked, start=1)}


@dataclass
class ClusteringResult:
    """Result from clustering the retention matrix.

    Attributes
    ----------
    n_clusters : int
        Number of clusters produced
    assignments : pd.DataFrame
        One row per intron: intron, cluster, cluster_size, cluster_label
    cluster_sizes : Dict[int, int]
        Map of cluster id to intron count
    cluster_labels : Dict[int, str]
        Map of cluster id to size-rank label
    centroids : pd.DataFrame
        Cluster centroids (index: cluster id, columns: conditions)
    inertia : float
        Total within-cluster sum of squares of the kept restart
    random_seed : int
        Seed used for the run
    """

    n_clusters: int = 0
    assignments: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame(columns=ASSIGNMENT_COLUMNS)
    )
    cluster_sizes: Dict[int, int] = field(default_factory=dict)
    cluster_labels: Dict[int, str] = field(default_factory=dict)
    centroids: pd.DataFrame = field(default_factory=pd.DataFrame)
    inertia: float = float("nan")
    random_seed: Optional[int] = None

    def summary_frame(self) -> pd.DataFrame:
        """Per-cluster label, size and centroid, ordered by label rank."""
        if not self.cluster_sizes:
            return pd.DataFrame(columns=[LABEL_COL, CLUSTER_COL, SIZE_COL])

        rows = []
        for cluster, size in self.cluster_sizes.items():
            row = {
                LABEL_COL: self.cluster_labels[cluster],
                CLUSTER_COL: cluster,
                SIZE_COL: size,
            }
            if cluster in self.centroids.index:
                row.update(self.centroids.loc[cluster].to_dict())
            rows.append(row)

        summary = pd.DataFrame(rows)
        summary["_rank"] = summary[LABEL_COL].str.extract(r"(\d+)$")[0].astype(int)
        return summary.sort_values("_rank").drop(columns=["_rank"]).reset_index(drop=True)

    def profiles(self, matrix: pd.DataFrame) -> pd.DataFrame:
        """Long table of per-intron retention with cluster labels.

        One row per (intron, condition) of the clustered matrix, carrying
        the cluster label and size; this is the data behind the faceted
        per-cluster retention figure.
        """
        long = (
            matrix.rename_axis(index=INTRON_COL, columns=None)
            .reset_index()
            .melt(id_vars=INTRON_COL, var_name=CONDITION_COL, value_name="mean_retention")
        )
        long = long.merge(self.assignments, on=INTRON_COL, how="inner")
        long[CONDITION_COL] = pd.Categorical(
            long[CONDITION_COL].astype(str), categories=list(matrix.columns), ordered=True
        )
        return long.sort_values([LABEL_COL, INTRON_COL, CONDITION_COL]).reset_index(drop=True)


class ClusterEngine:
    """k-means clustering of introns by their retention profile.

    Parameters
    ----------
    config : ClusteringConfig, optional
        Clustering configuration. If None, uses defaults.
    logger : logging.Logger, optional
        Logger instance. If None, uses the module logger.

    Example
    -------
    >>> engine = ClusterEngine(ClusteringConfig(n_clusters=9, random_seed=42))
    >>> result = engine.run_clustering(matrix)
    >>> result.summary_frame()
    """

    def __init__(
        self,
        config: Optional[ClusteringConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or ClusteringConfig()
        self.logger = logger or logging.getLogger(__name__)

    def run_clustering(
        self,
        matrix: pd.DataFrame,
        random_seed: Optional[int] = None,
        n_clusters: Optional[int] = None,
        expected_sizes: Optional[Sequence[int]] = None,
    ) -> ClusteringResult:
        """Cluster matrix rows and label clusters by size rank.

        Parameters
        ----------
        matrix : pd.DataFrame
            Complete-case matrix (introns x conditions)
        random_seed : int, optional
            Seed for k-means. Uses config default if None.
        n_clusters : int, optional
            Number of clusters. Uses config default if None.
        expected_sizes : Sequence[int], optional
            Declared cluster sizes. Uses config default if None.

        Returns
        -------
        ClusteringResult
            Empty result if the matrix has no rows

        Raises
        ------
        ValueError
            If the matrix has missing values, or fewer rows or distinct
            rows than clusters
        LabelMismatchError
            If declared sizes are configured and do not match
        """
        cfg = self.config
        random_seed = random_seed if random_seed is not None else cfg.random_seed
        n_clusters = n_clusters if n_clusters is not None else cfg.n_clusters
        expected_sizes = expected_sizes if expected_sizes is not None else cfg.expected_sizes

        if matrix.empty:
            self.logger.warning("Retention matrix is empty; skipping clustering")
            return ClusteringResult(random_seed=random_seed)

        values = matrix.to_numpy(dtype=float)
        if np.isnan(values).any():
            raise ValueError("Retention matrix contains missing values; build it complete-case")
        if len(matrix) < n_clusters:
            raise ValueError(
                f"Cannot form {n_clusters} clusters from {len(matrix)} introns"
            )
        n_distinct = len(np.unique(values, axis=0))
        if n_distinct < n_clusters:
            raise ValueError(
                f"Cannot form {n_clusters} clusters from {n_distinct} distinct retention "
                f"profiles ({len(matrix)} introns)"
            )

        self.logger.info(
            "Running k-means: k=%d, seed=%d, n_init=%d, max_iter=%d on %d introns",
            n_clusters,
            random_seed,
            cfg.n_init,
            cfg.max_iter,
            len(matrix),
        )

        km = KMeans(
            n_clusters=n_clusters,
            random_state=int(random_seed),
            n_init=cfg.n_init,
            max_iter=cfg.max_iter,
        )
        labels = km.fit_predict(values).astype(int)

        sizes = np.bincount(labels, minlength=n_clusters)
        cluster_sizes = {int(c): int(sizes[c]) for c in range(n_clusters)}
        cluster_labels = assign_size_labels(
            cluster_sizes, expected_sizes=expected_sizes, prefix=cfg.label_prefix
        )

        assignments = pd.DataFrame({
            INTRON_COL: matrix.index.astype(str),
            CLUSTER_COL: labels,
        })
        assignments[SIZE_COL] = assignments[CLUSTER_COL].map(cluster_sizes)
        assignments[LABEL_COL] = assignments[CLUSTER_COL].map(cluster_labels)

        centroids = pd.DataFrame(
            km.cluster_centers_, columns=list(matrix.columns), index=range(n_clusters)
        )
        centroids.index.name = CLUSTER_COL

        result = ClusteringResult(
            n_clusters=n_clusters,
            assignments=assignments,
            cluster_sizes=cluster_sizes,
            cluster_labels=cluster_labels,
            centroids=centroids,
            inertia=float(km.inertia_),
            random_seed=random_seed,
        )

        self.logger.info(
            "Computed %d clusters (sizes by label: %s)",
            result.n_clusters,
            ", ".join(
                f"{cluster_labels[c]}={s}"
                for c, s in sorted(cluster_sizes.items(), key=lambda kv: (kv[1], kv[0]))
            ),
        )
        return result
