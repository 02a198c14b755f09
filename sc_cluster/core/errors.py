"""Exceptions raised by the clustering core.

All errors derive from ``ScClusterError`` so callers can catch the whole
family at once. Messages carry the offending identifier or count.
"""

from typing import Optional


class ScClusterError(Exception):
    """Base class for clustering errors."""


class InvalidInput(ScClusterError):
    """Empty observation set, dimension mismatch, or degenerate distances."""


class MissingLabel(ScClusterError):
    """An observation has no entry in the label mapping."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Cell missing a label: {identifier!r}")


class EmptyCluster(ScClusterError):
    """A grouping step produced a cluster without members."""

    def __init__(self, cluster: Optional[int] = None):
        self.cluster = cluster
        if cluster is None:
            message = "Empty cluster"
        else:
            message = f"Empty cluster: {cluster}"
        super().__init__(message)


class ExternalPrimitiveFailure(ScClusterError):
    """A density or spectral primitive errored or returned malformed output."""

    def __init__(self, primitive: str, message: str):
        self.primitive = primitive
        super().__init__(f"{primitive}: {message}")
