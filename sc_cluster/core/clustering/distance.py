"""Pairwise distances between observation feature vectors."""

from typing import Callable, Optional, Sequence, Union

import numpy as np
from scipy.spatial.distance import pdist, squareform

from ..errors import InvalidInput

Metric = Union[str, Callable[[np.ndarray, np.ndarray], float]]


def euclidean_distance(x: np.ndarray, y: np.ndarray) -> float:
    """Euclidean distance between two vectors."""
    return float(np.sqrt(np.sum((np.asarray(y) - np.asarray(x)) ** 2)))


def pairwise_distances(
    features: np.ndarray,
    metric: Metric = "euclidean",
    identifiers: Optional[Sequence[str]] = None,
) -> np.ndarray:
    """Compute the full symmetric distance matrix.

    Parameters
    ----------
    features : np.ndarray
        Matrix with one observation per row
    metric : str or callable
        Any ``scipy.spatial.distance.pdist`` metric name, or a callable
        taking two vectors and returning a float
    identifiers : Sequence[str], optional
        Row identifiers, used in error messages

    Returns
    -------
    np.ndarray
        N x N distance matrix with a zero diagonal

    Raises
    ------
    InvalidInput
        If a distance is non-finite or negative (e.g. correlation distance
        over a zero-variance row)
    """
    features = np.asarray(features, dtype=float)
    n = features.shape[0]
    if n < 2:
        return np.zeros((n, n))

    condensed = pdist(features, metric=metric)
    bad = np.flatnonzero(~np.isfinite(condensed) | (condensed < 0))
    if bad.size:
        i, j = _condensed_to_pair(int(bad[0]), n)
        if identifiers is not None:
            where = f"{identifiers[i]!r} and {identifiers[j]!r}"
        else:
            where = f"rows {i} and {j}"
        raise InvalidInput(
            f"Degenerate distance ({condensed[bad[0]]}) between {where}; "
            f"{bad.size} invalid pair(s) in total"
        )
    return squareform(condensed)


def _condensed_to_pair(k: int, n: int):
    """Map a condensed-matrix index back to its (i, j) row pair."""
    i = 0
    remaining = k
    while remaining >= n - i - 1:
        remaining -= n - i - 1
        i += 1
    return i, i + 1 + remaining
