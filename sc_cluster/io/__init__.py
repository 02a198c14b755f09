"""I/O utilities for sc-cluster.

Provides logging, CSV I/O, and data loading utilities.
"""

from .logging import get_logger, log_json, log_yaml
from .csv import (
    ensure_output_dir,
    load_label_map,
    load_observations,
    write_dataframe,
)

__all__ = [
    # Logging
    "get_logger",
    "log_json",
    "log_yaml",
    # CSV I/O
    "ensure_output_dir",
    "load_label_map",
    "load_observations",
    "write_dataframe",
]
