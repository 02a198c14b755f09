"""Diversity metrics for label compositions.

Hill numbers give the effective number of labels in a group for a
given order q; order 1 is the exponential of the Shannon entropy.
"""

import numpy as np

from ..errors import InvalidInput


def _proportions(counts) -> np.ndarray:
    """Non-zero label proportions; empty when there are no counts."""
    counts = np.asarray(counts, dtype=float)
    total = counts.sum()
    if total == 0:
        return np.empty(0)
    return counts[counts > 0] / total


def compute_shannon_entropy(counts: np.ndarray) -> float:
    """Shannon entropy of label counts in nats (0 for empty counts)."""
    p = _proportions(counts)
    return float(-np.sum(p * np.log(p)))


def compute_hill_number(counts: np.ndarray, order: float = 1.0) -> float:
    """Compute the Hill number (true diversity) of order q.

    D_q = (sum(p_i^q))^(1 / (1 - q)), with the limits
    D_0 = number of labels present and D_1 = exp(H).

    A single label gives 1; n distinct labels with one cell each give n,
    whatever the order.

    Parameters
    ----------
    counts : np.ndarray
        Array of counts (non-negative)
    order : float
        Diversity order q >= 0

    Returns
    -------
    float
        Effective number of labels, 0 for empty counts

    Raises
    ------
    InvalidInput
        If the order is negative or not finite
    """
    if not np.isfinite(order) or order < 0:
        raise InvalidInput(f"Diversity order must be a non-negative number, got {order}")
    p = _proportions(counts)
    if p.size == 0:
        return 0.0
    if order == 0:
        return float(p.size)
    if np.isclose(order, 1.0):
        return float(np.exp(compute_shannon_entropy(p)))
    return float(np.sum(p ** order) ** (1.0 / (1.0 - order)))
