"""Pytest configuration and shared fixtures for sc-cluster tests."""

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pytest
import numpy as np

# Add package to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fixtures import (
    create_blob_observations,
    create_block_matrix,
    create_observations,
)


# ============================================================================
# Observation Fixtures
# ============================================================================


@pytest.fixture
def four_points():
    """Two tight pairs far apart: (0,0),(0,1) and (10,10),(10,11)."""
    return create_observations(
        [[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]],
        identifiers=["a", "b", "c", "d"],
        with_projection=True,
    )


@pytest.fixture
def single_point():
    """A single observation."""
    return create_observations([[1.0, 2.0]], identifiers=["only"])


@pytest.fixture
def line_points():
    """Four collinear points at unit spacing (tied merge distances)."""
    return create_observations([[0.0], [1.0], [2.0], [3.0]])


@pytest.fixture
def blobs():
    """Two Gaussian blobs of 20 cells each, with ground truth."""
    return create_blob_observations(n_per_cluster=20)


@pytest.fixture
def block_observations():
    """Six observations over a two-block non-negative matrix."""
    return create_observations(create_block_matrix())


@pytest.fixture
def random_matrix() -> np.ndarray:
    """30 x 5 random matrix."""
    rng = np.random.default_rng(7)
    return rng.normal(size=(30, 5))


# ============================================================================
# File Fixtures
# ============================================================================


@pytest.fixture
def matrix_csv(tmp_path) -> Path:
    """Cell-by-feature CSV with projection columns x, y."""
    path = tmp_path / "matrix.csv"
    path.write_text(
        "cell,g1,g2,x,y\n"
        "a,0,0,0.5,0.5\n"
        "b,0,1,0.6,0.4\n"
        "c,10,10,5.0,5.0\n"
        "d,10,11,5.1,4.9\n"
    )
    return path


@pytest.fixture
def labels_csv(tmp_path) -> Path:
    """item,label CSV for the cells of ``matrix_csv``."""
    path = tmp_path / "labels.csv"
    path.write_text("item,label\na,T\nb,B\nc,T\nd,T\n")
    return path
