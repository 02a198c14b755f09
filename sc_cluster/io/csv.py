"""CSV I/O utilities for sc-cluster.

Provides functions for loading observation matrices and label tables and
for writing result tables.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import pandas as pd

from ..core.clustering.tree import Observation, make_observations

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

LABEL_COLUMNS = ("item", "label")


def ensure_output_dir(path: PathLike) -> Path:
    """Create the directory at path if it does not exist and return it.

    Parameters
    ----------
    path : PathLike
        Directory path to create.

    Returns
    -------
    Path
        The created/existing directory path.
    """
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def load_observations(
    path: PathLike,
    delimiter: str = ",",
    cells_as_columns: bool = False,
    projection_columns: Optional[Sequence[str]] = None,
) -> List[Observation]:
    """Read an observation matrix.

    The first column (or, with ``cells_as_columns``, the header row) holds
    the cell identifiers.

    Parameters
    ----------
    path : PathLike
        Path to the CSV file.
    delimiter : str
        Field delimiter (default: ",").
    cells_as_columns : bool
        Matrix is feature-by-cell (features as rows) and must be transposed.
    projection_columns : Sequence[str], optional
        Two columns holding 2D projection coordinates. They are removed
        from the features. Only valid for cell-by-feature tables.

    Returns
    -------
    List[Observation]
        Observations in file order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If projection columns are missing or malformed.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Observation matrix not found: {csv_path}")
    df = pd.read_csv(csv_path, sep=delimiter, index_col=0)
    if cells_as_columns:
        df = df.T

    projections = None
    if projection_columns:
        if cells_as_columns:
            raise ValueError("Projection columns require a cell-by-feature table")
        if len(projection_columns) != 2:
            raise ValueError(f"Expected two projection columns, got {list(projection_columns)}")
        missing = [c for c in projection_columns if c not in df.columns]
        if missing:
            raise ValueError(f"Observation matrix missing projection columns: {missing}")
        coords = df[list(projection_columns)].to_numpy(dtype=float)
        projections = [(float(x), float(y)) for x, y in coords]
        df = df.drop(columns=list(projection_columns))

    logger.info("Loaded %d cells x %d features from %s", df.shape[0], df.shape[1], csv_path)
    return make_observations(
        [str(i) for i in df.index],
        df.to_numpy(dtype=float),
        projections=projections,
    )


def load_label_map(path: PathLike, delimiter: str = ",") -> Dict[str, str]:
    """Load an ``item,label`` table into a dictionary.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If columns are missing or an item has conflicting labels.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Label file not found: {csv_path}")
    df = pd.read_csv(csv_path, sep=delimiter, dtype=str)
    missing = [col for col in LABEL_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Label table missing columns: {missing}")

    conflicts = df.groupby("item")["label"].nunique()
    conflicts = conflicts[conflicts > 1]
    if not conflicts.empty:
        raise ValueError(
            f"Conflicting labels for {len(conflicts)} item(s), e.g. {conflicts.index[0]!r}"
        )
    return dict(zip(df["item"], df["label"]))


def write_dataframe(df: pd.DataFrame, path: PathLike, *, index: bool = False) -> Path:
    """Write DataFrame to path ensuring the parent directory exists.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to write.
    path : PathLike
        Output path.
    index : bool
        Whether to write row index (default: False).

    Returns
    -------
    Path
        The output path.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=index)
    return output_path
