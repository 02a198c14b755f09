"""Complete-linkage agglomerative dendrogram construction.

Merge order is fully determined by the input order: among pairs tied at
the smallest linkage distance, the pair whose clusters have the smallest
``(first_row_a, first_row_b)`` wins, where ``first_row`` is the lowest
input position inside a cluster. The cluster with the lower first row
becomes the left child.
"""

from typing import Sequence
import logging

import numpy as np

from .distance import Metric, pairwise_distances
from .tree import AgglomerativeTree, Branch, Leaf, Observation, observation_matrix

logger = logging.getLogger(__name__)


def build_dendrogram(
    observations: Sequence[Observation],
    metric: Metric = "euclidean",
) -> AgglomerativeTree:
    """Cluster observations with complete linkage.

    Parameters
    ----------
    observations : Sequence[Observation]
        Observations in input order (at least one)
    metric : str or callable
        Distance between feature vectors, Euclidean by default

    Returns
    -------
    AgglomerativeTree
        Dendrogram with N leaves and N - 1 branches

    Raises
    ------
    InvalidInput
        If there are no observations, dimensions differ, or a distance is
        degenerate
    """
    features = observation_matrix(observations)
    n = len(observations)
    nodes = [Leaf(obs) for obs in observations]
    if n == 1:
        return AgglomerativeTree(nodes[0])

    logger.info("Building complete-linkage dendrogram over %d observations", n)
    dist = pairwise_distances(
        features, metric=metric, identifiers=[obs.identifier for obs in observations]
    )

    # Slot i always holds the cluster whose first row is i, so row-major
    # order over the upper triangle is the tie-break order.
    dist = dist.astype(float, copy=True)
    np.fill_diagonal(dist, np.inf)
    lower = np.tril(np.ones((n, n), dtype=bool))

    for _ in range(n - 1):
        candidates = np.where(lower, np.inf, dist)
        best = candidates.min()
        a, b = np.argwhere(candidates == best)[0]
        nodes[a] = Branch(distance=float(best), left=nodes[a], right=nodes[b])
        nodes[b] = None

        merged = np.maximum(dist[a], dist[b])
        dist[a, :] = merged
        dist[:, a] = merged
        dist[a, a] = np.inf
        dist[b, :] = np.inf
        dist[:, b] = np.inf

    root = nodes[0]
    logger.debug("Root merge distance %.4f", root.distance)
    return AgglomerativeTree(root)
