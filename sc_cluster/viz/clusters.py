"""Scatter plot of cluster assignments on the 2D projection."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt

from ..core.clustering.tree import ClusterAssignment


def plot_clusters(
    assignments: Sequence[ClusterAssignment],
    output_path: Path,
    figsize: Tuple[int, int] = (7, 7),
    dpi: int = 200,
    title: str = "Clusters",
    xlabel: str = "Projection 1",
    ylabel: str = "Projection 2",
) -> Optional[Path]:
    """Plot each cell at its projection, colored by innermost cluster.

    Cells without a projection are skipped; nothing is written when no
    cell has one.

    Parameters
    ----------
    assignments : Sequence[ClusterAssignment]
        Cluster paths per cell
    output_path : Path
        Path to save figure
    figsize : Tuple[int, int]
        Figure size
    dpi : int
        Figure resolution
    title : str
        Plot title
    xlabel, ylabel : str
        Axis labels

    Returns
    -------
    Path or None
        The written file, or None if there was nothing to plot
    """
    points = [
        (a.observation.projection, a.innermost)
        for a in assignments
        if a.observation.projection is not None
    ]
    if not points:
        return None
    points.sort(key=lambda p: p[1])

    fig, ax = plt.subplots(figsize=figsize)
    clusters = sorted({c for _, c in points})
    cmap = plt.get_cmap("tab20")
    for i, cluster in enumerate(clusters):
        xs = [xy[0] for xy, c in points if c == cluster]
        ys = [xy[1] for xy, c in points if c == cluster]
        ax.scatter(xs, ys, s=12, color=cmap(i % cmap.N), label=str(cluster))

    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.set_aspect("equal", adjustable="datalim")
    if len(clusters) <= 20:
        ax.legend(title="Cluster", bbox_to_anchor=(1.02, 1), loc="upper left", fontsize=8)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return output_path
