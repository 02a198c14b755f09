"""sc-cluster: Hierarchical clustering of single-cell measurements.

This package provides tools for:
- Complete-linkage dendrograms with an automatic cut threshold
- Recursive spectral partitioning into nested clusters
- Density clustering (HDBSCAN) behind a thin adapter
- Per-cluster diversity of external cell labels

Example usage:
    >>> from sc_cluster.core.clustering import ClusteringEngine, make_observations
    >>> from sc_cluster.core.diversity import cluster_diversity
    >>>
    >>> observations = make_observations(barcodes, matrix)
    >>> results = ClusteringEngine().run(observations, method="hclust")
    >>> records = cluster_diversity(results, label_map, order=1.0)
"""

__version__ = "0.1.0"
