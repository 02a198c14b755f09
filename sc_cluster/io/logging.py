"""Logging utilities for sc-cluster.

Provides timestamped file logging and structured run records (JSON, YAML).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Tuple, Union

import numpy as np
import yaml

PathLike = Union[str, Path]

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str, log_path: PathLike, level: int = logging.INFO) -> Tuple[logging.Logger, Path]:
    """Attach a file handler writing to a run-stamped copy of ``log_path``.

    ``cluster.log`` becomes ``cluster_<YYYYmmdd_HHMMSS>.log`` so earlier
    runs are kept. A previous file handler on the same logger is replaced.

    Returns
    -------
    Tuple[logging.Logger, Path]
        The logger and the file it writes to
    """
    base = Path(log_path)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = base.with_name(f"{base.stem}_{stamp}{base.suffix or '.log'}")
    path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
        logger.removeHandler(handler)
        handler.close()
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger, path


def _to_builtin(value: Any) -> Any:
    """Serializer fallback for numpy scalars and paths."""
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    return str(value)


def log_json(log_path: PathLike, record: dict[str, Any]) -> None:
    """Append a JSON line to log_path."""
    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(record, default=_to_builtin))
        handle.write("\n")


def log_yaml(logger: logging.Logger, record: dict[str, Any], title: str = "") -> None:
    """Log a dictionary as a YAML document at INFO level."""
    yaml_text = yaml.safe_dump(record, sort_keys=False).rstrip("\n")
    if title:
        logger.info("%s\n%s", title, yaml_text)
    else:
        logger.info("%s", yaml_text)
