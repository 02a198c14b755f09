"""Utility functions for sc-cluster.

Provides statistical helpers used across modules.
"""

from .stats import (
    compute_percentiles,
    continuous_quantile,
)

__all__ = [
    "compute_percentiles",
    "continuous_quantile",
]
