"""Core computational modules for sc-cluster.

This package contains the analysis engines:
- clustering: Dendrograms, spectral partitioning, density clustering,
  flattening into cluster paths
- diversity: Per-cluster label diversity
"""

from .errors import (
    EmptyCluster,
    ExternalPrimitiveFailure,
    InvalidInput,
    MissingLabel,
    ScClusterError,
)

__all__ = [
    "EmptyCluster",
    "ExternalPrimitiveFailure",
    "InvalidInput",
    "MissingLabel",
    "ScClusterError",
]
