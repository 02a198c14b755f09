"""Visualization helpers for sc-cluster."""

from .clusters import plot_clusters

__all__ = ["plot_clusters"]
