"""Adapter around a black-box density clustering primitive (HDBSCAN).

The adapter only defines what crosses the boundary: a numeric matrix and
a minimum-points value go out, one cluster id and one membership
probability per row come back, in the same row order. Cluster id 0 means
noise.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
import logging

import numpy as np

from ..errors import ExternalPrimitiveFailure, InvalidInput, ScClusterError
from .tree import (
    ClusterAssignment,
    Observation,
    PartitionNode,
    RecursivePartitionTree,
    observation_matrix,
)

logger = logging.getLogger(__name__)

NOISE_CLUSTER = 0

DensityFn = Callable[[np.ndarray, int], Tuple[np.ndarray, np.ndarray]]


@dataclass(frozen=True)
class DensityAssignment:
    """Density clustering output for one observation."""

    observation: Observation
    cluster: int
    probability: float

    @property
    def identifier(self) -> str:
        return self.observation.identifier

    @property
    def is_noise(self) -> bool:
        return self.cluster == NOISE_CLUSTER


def hdbscan_primitive(matrix: np.ndarray, min_points: int) -> Tuple[np.ndarray, np.ndarray]:
    """Run scikit-learn's HDBSCAN.

    Noise (-1) is mapped to 0 and clusters are shifted to start at 1.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Cluster ids and membership probabilities, aligned with the rows
    """
    from sklearn.cluster import HDBSCAN

    model = HDBSCAN(min_cluster_size=min_points)
    model.fit(matrix)
    return model.labels_.astype(int) + 1, np.asarray(model.probabilities_, dtype=float)


def density_cluster(
    observations: Sequence[Observation],
    min_points: int = 5,
    primitive: Optional[DensityFn] = None,
) -> List[DensityAssignment]:
    """Cluster observations with a density primitive.

    Parameters
    ----------
    observations : Sequence[Observation]
        Observations; their order defines the matrix row order
    min_points : int
        Minimum cluster size passed to the primitive
    primitive : callable, optional
        ``f(matrix, min_points) -> (cluster_ids, probabilities)``.
        Defaults to ``hdbscan_primitive``.

    Returns
    -------
    List[DensityAssignment]
        One assignment per observation, in input order

    Raises
    ------
    InvalidInput
        On empty or ragged input, or ``min_points`` below 2
    ExternalPrimitiveFailure
        If the primitive errors or returns misaligned or malformed output
    """
    if min_points < 2:
        raise InvalidInput(f"min_points must be at least 2, got {min_points}")
    matrix = observation_matrix(observations)
    primitive = primitive or hdbscan_primitive
    name = getattr(primitive, "__name__", type(primitive).__name__)

    logger.info(
        "Density clustering %d observations with %s (min_points=%d)",
        len(observations),
        name,
        min_points,
    )
    try:
        output = primitive(matrix, min_points)
    except ScClusterError:
        raise
    except Exception as exc:
        raise ExternalPrimitiveFailure(name, str(exc)) from exc

    clusters, probabilities = _validate_output(name, output, len(observations))
    assignments = [
        DensityAssignment(observation=obs, cluster=int(c), probability=float(p))
        for obs, c, p in zip(observations, clusters, probabilities)
    ]
    logger.info(
        "Density clustering found %d clusters (%d noise observations)",
        len({a.cluster for a in assignments if not a.is_noise}),
        sum(a.is_noise for a in assignments),
    )
    return assignments


def _validate_output(name: str, output, n_rows: int) -> Tuple[np.ndarray, np.ndarray]:
    try:
        raw_clusters, raw_probabilities = output
    except (TypeError, ValueError) as exc:
        raise ExternalPrimitiveFailure(
            name, "expected a (cluster_ids, probabilities) pair"
        ) from exc

    clusters = np.asarray(raw_clusters)
    probabilities = np.asarray(raw_probabilities, dtype=float)
    if clusters.ndim != 1 or clusters.shape[0] != n_rows:
        raise ExternalPrimitiveFailure(
            name, f"returned {clusters.size} cluster ids for {n_rows} rows"
        )
    if probabilities.ndim != 1 or probabilities.shape[0] != n_rows:
        raise ExternalPrimitiveFailure(
            name, f"returned {probabilities.size} probabilities for {n_rows} rows"
        )
    if not np.issubdtype(clusters.dtype, np.integer):
        if not np.all(np.isfinite(clusters.astype(float))) or np.any(
            clusters.astype(float) != np.round(clusters.astype(float))
        ):
            raise ExternalPrimitiveFailure(name, "cluster ids must be integers")
        clusters = clusters.astype(int)
    if np.any(clusters < 0):
        raise ExternalPrimitiveFailure(name, "cluster ids must be non-negative")
    if not np.all(np.isfinite(probabilities)) or np.any(
        (probabilities < 0) | (probabilities > 1)
    ):
        raise ExternalPrimitiveFailure(name, "probabilities must lie within [0, 1]")
    return clusters, probabilities


def density_grouping(assignments: Sequence[DensityAssignment]) -> RecursivePartitionTree:
    """Degenerate single-level grouping: root plus one leaf per cluster id."""
    by_cluster: dict = {}
    for assignment in assignments:
        by_cluster.setdefault(assignment.cluster, []).append(assignment.observation)
    children = tuple(
        PartitionNode(items=tuple(members)) for _, members in sorted(by_cluster.items())
    )
    root_items = tuple(a.observation for a in assignments)
    if len(children) == 1:
        return RecursivePartitionTree(children[0])
    return RecursivePartitionTree(PartitionNode(items=root_items, children=children))


def density_to_assignments(assignments: Sequence[DensityAssignment]) -> List[ClusterAssignment]:
    """Cluster paths for density output, keeping the primitive's ids."""
    return [
        ClusterAssignment(observation=a.observation, path=(a.cluster,)) for a in assignments
    ]
