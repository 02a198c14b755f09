"""Recursive spectral bipartitioning.

``SpectralPartitioner`` drives the recursion and builds the partition
tree; the numeric split itself is delegated to a bipartition primitive
with the signature ``f(matrix, normalize) -> Optional[Bipartition]``.
``spectral_bipartition`` is the default primitive.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
import logging

import numpy as np
from scipy import sparse
from scipy.sparse.linalg import svds

from ..errors import ExternalPrimitiveFailure, InvalidInput, ScClusterError
from .tree import Observation, PartitionNode, RecursivePartitionTree, observation_matrix

NORMALIZATIONS = ("b1", "none")

# Dense SVD below this many rows, ARPACK above.
DENSE_SVD_MAX_ROWS = 500


@dataclass(frozen=True)
class Bipartition:
    """Split of matrix rows into two groups.

    Attributes
    ----------
    left : np.ndarray
        Row indices of the first group
    right : np.ndarray
        Row indices of the second group
    modularity : float
        Newman-Girvan modularity of the split
    """

    left: np.ndarray
    right: np.ndarray
    modularity: float


@dataclass(frozen=True)
class SplitRecord:
    """Bookkeeping for one accepted split."""

    depth: int
    sizes: Tuple[int, int]
    modularity: float


BipartitionFn = Callable[[object, bool], Optional[Bipartition]]


def spectral_bipartition(matrix, normalize: bool = True) -> Optional[Bipartition]:
    """Split rows by the sign of the second left singular vector.

    The similarity between rows is ``A = B B^T`` for the non-negative
    matrix ``B``; with ``normalize`` the rows of ``B`` are first scaled to
    unit length (cosine similarity). Rows are split using the second left
    singular vector of ``D^-1/2 B`` where ``D`` holds the row sums of ``A``.

    Parameters
    ----------
    matrix : array-like or scipy.sparse matrix
        Non-negative observation matrix
    normalize : bool
        Apply B1 (row L2) normalization first

    Returns
    -------
    Bipartition or None
        None when the split is degenerate or its modularity is not positive
    """
    B = sparse.csr_matrix(matrix, dtype=float)
    n_rows, n_cols = B.shape
    if n_rows < 2 or n_cols < 2:
        return None
    if B.nnz and B.data.min() < 0:
        raise ExternalPrimitiveFailure(
            "spectral_bipartition", "matrix must be non-negative"
        )

    if normalize:
        norms = np.sqrt(np.asarray(B.multiply(B).sum(axis=1)).ravel())
        norms[norms == 0] = 1.0
        B = sparse.csr_matrix(sparse.diags(1.0 / norms) @ B)

    column_totals = np.asarray(B.sum(axis=0)).ravel()
    degrees = B @ column_totals
    n_empty = int(np.sum(degrees <= 0))
    if n_empty:
        raise ExternalPrimitiveFailure(
            "spectral_bipartition", f"{n_empty} row(s) have no similarity to any other row"
        )

    C = sparse.csr_matrix(sparse.diags(1.0 / np.sqrt(degrees)) @ B)
    vector = _second_left_singular_vector(C)
    if vector[0] < 0:
        vector = -vector

    left = np.flatnonzero(vector >= 0)
    right = np.flatnonzero(vector < 0)
    if left.size == 0 or right.size == 0:
        return None

    modularity = _modularity(B, column_totals, (left, right))
    if modularity <= 0:
        return None
    return Bipartition(left=left, right=right, modularity=float(modularity))


def _second_left_singular_vector(C: sparse.csr_matrix) -> np.ndarray:
    if C.shape[0] <= DENSE_SVD_MAX_ROWS or min(C.shape) <= 3:
        U, S, _ = np.linalg.svd(C.toarray(), full_matrices=False)
        order = np.argsort(-S, kind="stable")
        return U[:, order[1]]
    U, S, _ = svds(C, k=2, v0=np.ones(min(C.shape)))
    order = np.argsort(-S, kind="stable")
    return U[:, order[1]]


def _modularity(B, column_totals: np.ndarray, groups: Sequence[np.ndarray]) -> float:
    total = float(column_totals @ column_totals)
    if total <= 0:
        return 0.0
    q = 0.0
    for group in groups:
        group_totals = np.asarray(B[group].sum(axis=0)).ravel()
        within = float(group_totals @ group_totals) / total
        degree_share = float(group_totals @ column_totals) / total
        q += within - degree_share ** 2
    return q


class SpectralPartitioner:
    """Recursive bipartitioning into a ``RecursivePartitionTree``.

    Parameters
    ----------
    bipartition : callable, optional
        Primitive returning a ``Bipartition`` or None to stop. Defaults to
        ``spectral_bipartition``.
    min_size : int
        Splits producing a group smaller than this are rejected
    max_depth : int, optional
        Stop splitting below this depth
    logger : logging.Logger, optional
        Logger instance

    Example
    -------
    >>> partitioner = SpectralPartitioner(min_size=5)
    >>> tree = partitioner.partition(observations, normalization="b1")
    >>> tree.splits[0].modularity
    """

    def __init__(
        self,
        bipartition: Optional[BipartitionFn] = None,
        min_size: int = 1,
        max_depth: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if min_size < 1:
            raise InvalidInput(f"min_size must be at least 1, got {min_size}")
        self.bipartition = bipartition or spectral_bipartition
        self.min_size = min_size
        self.max_depth = max_depth
        self.logger = logger or logging.getLogger(__name__)

    @property
    def primitive_name(self) -> str:
        return getattr(self.bipartition, "__name__", type(self.bipartition).__name__)

    def partition(
        self,
        observations: Sequence[Observation],
        matrix=None,
        normalization: str = "b1",
    ) -> RecursivePartitionTree:
        """Recursively split observations.

        Parameters
        ----------
        observations : Sequence[Observation]
            Observations, aligned with the rows of ``matrix``
        matrix : array-like or scipy.sparse matrix, optional
            Matrix handed to the primitive. Defaults to the stacked
            observation features.
        normalization : str
            ``"b1"`` or ``"none"``, passed to the primitive as a flag

        Returns
        -------
        RecursivePartitionTree
            Partition tree; ``splits`` lists every accepted split
        """
        if normalization not in NORMALIZATIONS:
            raise InvalidInput(
                f"Unknown normalization {normalization!r}; expected one of {NORMALIZATIONS}"
            )
        if matrix is None:
            matrix = observation_matrix(observations)
        elif len(observations) == 0:
            raise InvalidInput("No observations to cluster")
        if sparse.issparse(matrix):
            matrix = sparse.csr_matrix(matrix)
        else:
            matrix = np.asarray(matrix, dtype=float)
        if matrix.shape[0] != len(observations):
            raise InvalidInput(
                f"Matrix has {matrix.shape[0]} rows for {len(observations)} observations"
            )

        self.logger.info(
            "Spectral partitioning of %d observations (normalization=%s, min_size=%d)",
            len(observations),
            normalization,
            self.min_size,
        )
        splits: List[SplitRecord] = []
        root = self._split(
            observations,
            matrix,
            np.arange(len(observations)),
            depth=0,
            normalize=normalization == "b1",
            splits=splits,
        )
        self.logger.info("Spectral partitioning accepted %d splits", len(splits))
        return RecursivePartitionTree(root, splits=splits)

    def _split(
        self,
        observations: Sequence[Observation],
        matrix,
        indices: np.ndarray,
        depth: int,
        normalize: bool,
        splits: List[SplitRecord],
    ) -> PartitionNode:
        items = tuple(observations[i] for i in indices)
        if len(indices) < 2 or (self.max_depth is not None and depth >= self.max_depth):
            return PartitionNode(items=items)

        try:
            result = self.bipartition(matrix[indices], normalize)
        except ScClusterError:
            raise
        except Exception as exc:
            raise ExternalPrimitiveFailure(self.primitive_name, str(exc)) from exc
        if result is None:
            return PartitionNode(items=items)

        left, right = self._validate(result, len(indices))
        if len(left) < self.min_size or len(right) < self.min_size:
            self.logger.debug(
                "Rejecting split of %d at depth %d (sizes %d/%d)",
                len(indices),
                depth,
                len(left),
                len(right),
            )
            return PartitionNode(items=items)

        splits.append(
            SplitRecord(depth=depth, sizes=(len(left), len(right)), modularity=result.modularity)
        )
        children = (
            self._split(observations, matrix, indices[left], depth + 1, normalize, splits),
            self._split(observations, matrix, indices[right], depth + 1, normalize, splits),
        )
        return PartitionNode(items=items, children=children, modularity=result.modularity)

    def _validate(self, result: Bipartition, n_rows: int) -> Tuple[np.ndarray, np.ndarray]:
        try:
            left = np.asarray(result.left, dtype=int).ravel()
            right = np.asarray(result.right, dtype=int).ravel()
        except (AttributeError, TypeError, ValueError) as exc:
            raise ExternalPrimitiveFailure(
                self.primitive_name, f"malformed bipartition: {exc}"
            ) from exc
        if left.size == 0 or right.size == 0:
            raise ExternalPrimitiveFailure(self.primitive_name, "split has an empty side")
        combined = np.sort(np.concatenate([left, right]))
        if combined.size != n_rows or not np.array_equal(combined, np.arange(n_rows)):
            raise ExternalPrimitiveFailure(
                self.primitive_name,
                f"split does not cover the {n_rows} input rows exactly once",
            )
        return left, right
