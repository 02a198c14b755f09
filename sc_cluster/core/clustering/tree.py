"""Data model for hierarchical clustering.

Two concrete hierarchies share one grouping interface:

- ``AgglomerativeTree``: binary dendrogram of ``Leaf``/``Branch`` nodes
  with a merge distance on every branch.
- ``RecursivePartitionTree``: tree of ``PartitionNode`` produced by
  recursive bipartitioning (or the flat density grouping).

Both expose ``kind``, ``root``, ``children(node)``, ``members(node)`` and
``observations()``, which is all the tree walker relies on.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy import sparse

from ..errors import InvalidInput

Cluster = int
ClusterPath = Tuple[int, ...]


@dataclass(frozen=True, eq=False)
class Observation:
    """One input row.

    Attributes
    ----------
    identifier : str
        Stable, unique cell identifier (barcode)
    features : np.ndarray
        Feature vector used for distance computations
    row : int
        Position of the row in the input order
    projection : Tuple[float, float], optional
        2D coordinates used only for labeling and plotting
    """

    identifier: str
    features: np.ndarray
    row: int
    projection: Optional[Tuple[float, float]] = None


def make_observations(
    identifiers: Sequence[str],
    matrix,
    projections: Optional[Sequence[Tuple[float, float]]] = None,
) -> List[Observation]:
    """Pair identifiers with matrix rows.

    Parameters
    ----------
    identifiers : Sequence[str]
        Row identifiers, unique
    matrix : array-like or scipy.sparse matrix
        Observation matrix, rows = cells
    projections : Sequence[Tuple[float, float]], optional
        Per-row 2D projection

    Returns
    -------
    List[Observation]
        Observations in input order

    Raises
    ------
    InvalidInput
        On empty input, mismatched lengths, duplicate identifiers or
        non-finite values
    """
    values = matrix.toarray() if sparse.issparse(matrix) else np.asarray(matrix, dtype=float)
    if values.ndim != 2:
        raise InvalidInput(f"Expected a 2D observation matrix, got {values.ndim} dimensions")
    if values.shape[0] == 0:
        raise InvalidInput("No observations to cluster")
    if len(identifiers) != values.shape[0]:
        raise InvalidInput(
            f"Got {len(identifiers)} identifiers for {values.shape[0]} matrix rows"
        )
    if projections is not None and len(projections) != values.shape[0]:
        raise InvalidInput(
            f"Got {len(projections)} projections for {values.shape[0]} matrix rows"
        )
    _check_unique(identifiers)
    if not np.all(np.isfinite(values)):
        bad = int(np.argwhere(~np.isfinite(values))[0][0])
        raise InvalidInput(f"Non-finite feature value for {identifiers[bad]!r}")

    return [
        Observation(
            identifier=str(identifier),
            features=values[i].astype(float, copy=True),
            row=i,
            projection=None if projections is None else tuple(projections[i]),
        )
        for i, identifier in enumerate(identifiers)
    ]


def _check_unique(identifiers: Iterable[str]) -> None:
    seen = set()
    for identifier in identifiers:
        if identifier in seen:
            raise InvalidInput(f"Duplicate identifier: {identifier!r}")
        seen.add(identifier)


def observation_matrix(observations: Sequence[Observation]) -> np.ndarray:
    """Stack observation features into a matrix, preserving order.

    Raises
    ------
    InvalidInput
        If the sequence is empty or feature dimensionality differs
    """
    if len(observations) == 0:
        raise InvalidInput("No observations to cluster")
    dim = observations[0].features.shape
    for obs in observations:
        if obs.features.ndim != 1 or obs.features.shape != dim:
            raise InvalidInput(
                f"Feature dimension mismatch for {obs.identifier!r}: "
                f"expected {dim}, got {obs.features.shape}"
            )
    _check_unique(obs.identifier for obs in observations)
    return np.vstack([obs.features for obs in observations])


# ---------------------------------------------------------------------------
# Agglomerative dendrogram
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Leaf:
    """Dendrogram leaf wrapping exactly one observation."""

    observation: Observation


@dataclass(frozen=True, eq=False)
class Branch:
    """Dendrogram merge of two subtrees at ``distance``."""

    distance: float
    left: "DendrogramNode"
    right: "DendrogramNode"


DendrogramNode = Union[Leaf, Branch]


class AgglomerativeTree:
    """Binary merge tree produced by agglomerative clustering."""

    kind = "agglomerative"

    def __init__(self, root: DendrogramNode):
        self.root = root

    def children(self, node: DendrogramNode) -> Tuple[DendrogramNode, ...]:
        if isinstance(node, Branch):
            return (node.left, node.right)
        return ()

    def members(self, node: DendrogramNode) -> Tuple[Observation, ...]:
        if isinstance(node, Leaf):
            return (node.observation,)
        return ()

    def observations(self) -> List[Observation]:
        """Leaves left to right."""
        return [
            obs for node in iter_preorder(self, self.root) for obs in self.members(node)
        ]

    def distances(self) -> List[float]:
        """Branch merge distances in pre-order."""
        return [
            node.distance
            for node in iter_preorder(self, self.root)
            if isinstance(node, Branch)
        ]

    @property
    def n_leaves(self) -> int:
        return len(self.observations())

    @property
    def n_branches(self) -> int:
        return len(self.distances())


# ---------------------------------------------------------------------------
# Recursive partition tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class PartitionNode:
    """Node of a recursive partition.

    Leaves hold their observations in ``items``; internal nodes hold the
    union of their descendants' items and the split modularity.
    """

    items: Tuple[Observation, ...]
    children: Tuple["PartitionNode", ...] = ()
    modularity: Optional[float] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children


class RecursivePartitionTree:
    """Cluster tree produced by recursive partitioning."""

    kind = "recursive_partition"

    def __init__(self, root: PartitionNode, splits: Optional[list] = None):
        self.root = root
        self.splits = list(splits or [])

    def children(self, node: PartitionNode) -> Tuple[PartitionNode, ...]:
        return node.children

    def members(self, node: PartitionNode) -> Tuple[Observation, ...]:
        return node.items if node.is_leaf else ()

    def observations(self) -> List[Observation]:
        """Observations of the leaf clusters, left to right."""
        return [
            obs for node in iter_preorder(self, self.root) for obs in self.members(node)
        ]

    @property
    def n_leaves(self) -> int:
        return sum(1 for node in iter_preorder(self, self.root) if node.is_leaf)


HierarchicalGrouping = Union[AgglomerativeTree, RecursivePartitionTree]


def iter_preorder(grouping: HierarchicalGrouping, start) -> Iterator:
    """Depth-first pre-order over nodes, left child first.

    Iterative so chained dendrograms over many cells do not hit the
    recursion limit.
    """
    stack = [start]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(grouping.children(node)))


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClusterAssignment:
    """An observation with its cluster path (coarsest first)."""

    observation: Observation
    path: ClusterPath

    @property
    def identifier(self) -> str:
        return self.observation.identifier

    @property
    def innermost(self) -> Cluster:
        return self.path[-1]


@dataclass
class ClusterResults:
    """Cluster assignments together with the grouping that produced them.

    Attributes
    ----------
    assignments : List[ClusterAssignment]
        One entry per observation (and per membership)
    grouping : HierarchicalGrouping
        Dendrogram or partition tree behind the assignments
    method : str
        ``hclust``, ``hspec`` or ``hdbscan``
    threshold : float, optional
        Cut threshold used by single-cut flattening
    """

    assignments: List[ClusterAssignment]
    grouping: HierarchicalGrouping
    method: str
    threshold: Optional[float] = None
    metadata: dict = field(default_factory=dict)

    @property
    def n_clusters(self) -> int:
        """Number of distinct innermost clusters."""
        return len({a.innermost for a in self.assignments})

    def cluster_sizes(self) -> dict:
        """Map innermost cluster id to member count, ascending by id."""
        sizes: dict = {}
        for assignment in self.assignments:
            sizes[assignment.innermost] = sizes.get(assignment.innermost, 0) + 1
        return dict(sorted(sizes.items()))

    def to_pairs(self) -> List[Tuple[str, ClusterPath]]:
        """(identifier, path) pairs in assignment order."""
        return [(a.identifier, a.path) for a in self.assignments]
