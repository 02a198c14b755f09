"""Automatic cut threshold for flattening a dendrogram."""

from ...utils.stats import continuous_quantile
from .tree import AgglomerativeTree

DEFAULT_CUT_QUANTILE = 0.9

# Returned for a dendrogram without branches (a single observation).
NO_BRANCH_THRESHOLD = 0.0


def find_cut(tree: AgglomerativeTree, quantile: float = DEFAULT_CUT_QUANTILE) -> float:
    """Return the ``quantile`` of all branch merge distances.

    Merge distances need not be monotonic from leaves to root; only their
    distribution matters here.

    Parameters
    ----------
    tree : AgglomerativeTree
        Dendrogram to cut
    quantile : float
        Quantile in [0, 1], 0.9 by default

    Returns
    -------
    float
        Cut threshold, ``NO_BRANCH_THRESHOLD`` when the tree is a single leaf
    """
    return continuous_quantile(tree.distances(), quantile, empty=NO_BRANCH_THRESHOLD)
