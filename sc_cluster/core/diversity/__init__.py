"""Diversity module for per-cluster label statistics.

Groups cells by their innermost cluster and summarises the composition of
externally supplied labels with Hill numbers.

Example Usage
-------------
>>> from sc_cluster.core.diversity import cluster_diversity
>>> records = cluster_diversity(results, label_map, order=1.0)
>>> [(r.cluster, r.diversity, r.size) for r in records]
"""

from .metrics import compute_hill_number, compute_shannon_entropy
from .aggregator import (
    DiversityRecord,
    cluster_diversity,
    diversity_to_frame,
    label_frame,
)

__all__ = [
    # Metrics
    "compute_hill_number",
    "compute_shannon_entropy",
    # Aggregation
    "DiversityRecord",
    "cluster_diversity",
    "diversity_to_frame",
    "label_frame",
]
