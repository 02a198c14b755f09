"""Per-cluster diversity of external labels.

Cells are grouped by their innermost cluster (the last element of the
cluster path) and each group's label composition is summarised as a Hill
number of the requested order.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Union
import logging

import numpy as np
import pandas as pd

from ..clustering.tree import ClusterAssignment, ClusterResults
from ..errors import InvalidInput, MissingLabel
from .metrics import compute_hill_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiversityRecord:
    """Diversity of one innermost cluster.

    Attributes
    ----------
    cluster : int
        Innermost cluster id
    diversity : float
        Hill number of the label composition
    size : int
        Number of cells in the cluster
    """

    cluster: int
    diversity: float
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {"cluster": self.cluster, "diversity": self.diversity, "size": self.size}


Assignments = Union[ClusterResults, Sequence[ClusterAssignment]]


def _as_assignments(assignments: Assignments) -> Sequence[ClusterAssignment]:
    if isinstance(assignments, ClusterResults):
        return assignments.assignments
    return assignments


def label_frame(assignments: Assignments, label_map: Mapping[str, str]) -> pd.DataFrame:
    """Tabulate cell, innermost cluster and label.

    Raises
    ------
    InvalidInput
        If an assignment has an empty cluster path
    MissingLabel
        If a cell has no label
    """
    rows = []
    for assignment in _as_assignments(assignments):
        if not assignment.path:
            raise InvalidInput(f"No cluster for cell {assignment.identifier!r}")
        identifier = assignment.identifier
        if identifier not in label_map:
            raise MissingLabel(identifier)
        rows.append(
            {
                "cell": identifier,
                "cluster": assignment.innermost,
                "label": label_map[identifier],
            }
        )
    return pd.DataFrame(rows, columns=["cell", "cluster", "label"])


def cluster_diversity(
    assignments: Assignments,
    label_map: Mapping[str, str],
    order: float = 1.0,
) -> List[DiversityRecord]:
    """Compute the label diversity of every innermost cluster.

    Parameters
    ----------
    assignments : ClusterResults or Sequence[ClusterAssignment]
        Cluster paths per cell
    label_map : Mapping[str, str]
        Cell identifier to label
    order : float
        Hill number order (0 = richness, 1 = exp(Shannon))

    Returns
    -------
    List[DiversityRecord]
        One record per innermost cluster, ascending by cluster id

    Raises
    ------
    MissingLabel
        If a cell has no entry in ``label_map``
    """
    df = label_frame(assignments, label_map)
    records = []
    for cluster, group_df in df.groupby("cluster", sort=True):
        counts = group_df["label"].value_counts().values
        records.append(
            DiversityRecord(
                cluster=int(cluster),
                diversity=compute_hill_number(counts, order),
                size=len(group_df),
            )
        )

    logger.info(
        "Computed order-%s diversity for %d clusters (%d cells)",
        order,
        len(records),
        len(df),
    )
    return records


def diversity_to_frame(records: Sequence[DiversityRecord]) -> pd.DataFrame:
    """Convert diversity records to a DataFrame (cluster, diversity, size)."""
    return pd.DataFrame(
        [r.to_dict() for r in records], columns=["cluster", "diversity", "size"]
    ).astype({"cluster": np.int64, "size": np.int64})
