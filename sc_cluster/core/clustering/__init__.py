"""Clustering module for hierarchical cell grouping.

Provides complete-linkage dendrograms with an automatic cut, recursive
spectral partitioning, and an adapter around density clustering
(HDBSCAN). All paths produce per-cell cluster paths.

Example Usage
-------------
>>> from sc_cluster.core.clustering import (
...     ClusteringEngine, ClusterRunConfig, make_observations,
... )
>>> observations = make_observations(ids, matrix)
>>> engine = ClusteringEngine(ClusterRunConfig(method="hspec"))
>>> results = engine.run(observations)
>>> results.cluster_sizes()

Results are written with ``sc_cluster.core.clustering.export``.
"""

__version__ = "0.1.0"

# Configuration classes
from .config import (
    ClusterRunConfig,
    DensityConfig,
    DiversityConfig,
    HierarchicalConfig,
    SpectralConfig,
)

# Data model
from .tree import (
    AgglomerativeTree,
    Branch,
    ClusterAssignment,
    ClusterResults,
    Leaf,
    Observation,
    PartitionNode,
    RecursivePartitionTree,
    make_observations,
    observation_matrix,
)

# Building blocks
from .distance import euclidean_distance, pairwise_distances
from .dendrogram import build_dendrogram
from .cut import find_cut
from .walker import (
    ClusterGraph,
    cut_tree,
    flatten_at_cut,
    flatten_at_cuts,
    flatten_nested,
    to_cluster_graph,
)
from .spectral import Bipartition, SpectralPartitioner, SplitRecord, spectral_bipartition
from .density import DensityAssignment, density_cluster, hdbscan_primitive

# Clustering engine
from .engine import ClusteringEngine

__all__ = [
    # Version
    "__version__",
    # Config
    "ClusterRunConfig",
    "DensityConfig",
    "DiversityConfig",
    "HierarchicalConfig",
    "SpectralConfig",
    # Data model
    "AgglomerativeTree",
    "Branch",
    "ClusterAssignment",
    "ClusterResults",
    "Leaf",
    "Observation",
    "PartitionNode",
    "RecursivePartitionTree",
    "make_observations",
    "observation_matrix",
    # Building blocks
    "euclidean_distance",
    "pairwise_distances",
    "build_dendrogram",
    "find_cut",
    "ClusterGraph",
    "cut_tree",
    "flatten_at_cut",
    "flatten_at_cuts",
    "flatten_nested",
    "to_cluster_graph",
    "Bipartition",
    "SpectralPartitioner",
    "SplitRecord",
    "spectral_bipartition",
    "DensityAssignment",
    "density_cluster",
    "hdbscan_primitive",
    # Engine
    "ClusteringEngine",
]
