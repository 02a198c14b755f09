"""Export clustering results to CSV and JSON.

Writes:
- cluster_list.csv: one row per assignment (cell, cluster, path)
- diversity.csv: per-cluster diversity records (when computed)
- summary.json: run metadata and cluster sizes
"""

from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union
import json
import logging

import pandas as pd

from ...io.csv import ensure_output_dir, write_dataframe
from ...utils.stats import compute_percentiles
from .tree import AgglomerativeTree, ClusterResults

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"

MERGE_PERCENTILES = (25, 50, 75, 90)


def format_path(path: Sequence[int]) -> str:
    """Render a cluster path as ``1/2/5``."""
    return PATH_SEPARATOR.join(str(c) for c in path)


def cluster_list_to_frame(results: ClusterResults) -> pd.DataFrame:
    """Tabulate assignments.

    Returns
    -------
    pd.DataFrame
        Columns ``cell``, ``cluster`` (innermost), ``path``; density
        results also carry ``probability``
    """
    df = pd.DataFrame(
        {
            "cell": [a.identifier for a in results.assignments],
            "cluster": [a.innermost for a in results.assignments],
            "path": [format_path(a.path) for a in results.assignments],
        },
        columns=["cell", "cluster", "path"],
    )
    density = results.metadata.get("density")
    if density is not None:
        by_cell = {d.identifier: d.probability for d in density}
        df["probability"] = df["cell"].map(by_cell)
    return df


def build_summary(results: ClusterResults) -> Dict[str, Any]:
    """Run summary for ``summary.json``."""
    summary: Dict[str, Any] = {
        "method": results.method,
        "n_cells": len({a.identifier for a in results.assignments}),
        "n_clusters": results.n_clusters,
        "cluster_sizes": {str(k): v for k, v in results.cluster_sizes().items()},
    }
    if results.metadata.get("nested"):
        summary["nested"] = True
    if results.threshold is not None:
        summary["threshold"] = results.threshold
    if "cuts" in results.metadata:
        summary["cuts"] = list(results.metadata["cuts"])
    if isinstance(results.grouping, AgglomerativeTree) and results.grouping.n_branches:
        values = compute_percentiles(results.grouping.distances(), MERGE_PERCENTILES)
        summary["merge_distance_percentiles"] = {
            f"p{p}": float(v) for p, v in zip(MERGE_PERCENTILES, values)
        }
    if "splits" in results.metadata:
        summary["splits"] = [
            {"depth": s.depth, "sizes": list(s.sizes), "modularity": round(s.modularity, 6)}
            for s in results.metadata["splits"]
        ]
    return summary


def write_cluster_results(
    results: ClusterResults,
    output_dir: Union[str, Path],
    diversity: Optional[pd.DataFrame] = None,
) -> Dict[str, Path]:
    """Write cluster list, optional diversity table and summary.

    Parameters
    ----------
    results : ClusterResults
        Clustering output
    output_dir : str or Path
        Output directory (created if missing)
    diversity : pd.DataFrame, optional
        Output of ``diversity_to_frame``

    Returns
    -------
    Dict[str, Path]
        Paths of the written files keyed by artifact name
    """
    out = ensure_output_dir(output_dir)
    written = {
        "cluster_list": write_dataframe(cluster_list_to_frame(results), out / "cluster_list.csv")
    }
    if diversity is not None:
        written["diversity"] = write_dataframe(diversity, out / "diversity.csv")

    summary_path = out / "summary.json"
    with open(summary_path, "w") as f:
        json.dump(build_summary(results), f, indent=2)
    written["summary"] = summary_path

    logger.info("Wrote %d artifacts to %s", len(written), out)
    return written
