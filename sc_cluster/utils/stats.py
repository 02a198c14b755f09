"""Statistical utilities for sc-cluster.

Provides quantile helpers shared by the cut selector and exports.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Union

import numpy as np

ArrayLike = Union[Iterable[float], np.ndarray]


def _to_clean_array(values: ArrayLike) -> np.ndarray:
    """Convert input to clean numpy array, removing non-finite values.

    Parameters
    ----------
    values : ArrayLike
        Input values (list, iterable, or array).

    Returns
    -------
    np.ndarray
        Clean array with only finite values.
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return arr
    return arr[np.isfinite(arr)]


def continuous_quantile(values: ArrayLike, q: float, *, empty: float = 0.0) -> float:
    """Continuous quantile with linear interpolation between order statistics.

    Uses the Hyndman-Fan type 7 estimator (numpy's ``linear`` method).

    Parameters
    ----------
    values : ArrayLike
        Input values. Non-finite values are ignored.
    q : float
        Quantile in [0, 1].
    empty : float
        Value returned when no finite values remain.

    Returns
    -------
    float
        The interpolated quantile, or ``empty``.
    """
    if not 0.0 <= q <= 1.0:
        raise ValueError(f"Quantile must be within [0, 1], got {q}")
    arr = _to_clean_array(values)
    if arr.size == 0:
        return float(empty)
    return float(np.quantile(arr, q, method="linear"))


def compute_percentiles(values: ArrayLike, percentiles: Sequence[float]) -> np.ndarray:
    """Compute percentile values ignoring NaNs.

    Parameters
    ----------
    values : ArrayLike
        Input values.
    percentiles : Sequence[float]
        Percentiles to compute (0-100).

    Returns
    -------
    np.ndarray
        Computed percentile values. Returns NaN array if input is empty.
    """
    arr = _to_clean_array(values)
    if arr.size == 0:
        return np.full(len(percentiles), np.nan)
    return np.percentile(arr, percentiles)
