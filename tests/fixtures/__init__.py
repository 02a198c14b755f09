"""Test fixtures for sc-cluster.

Provides synthetic data generators and test utilities.
"""

from .mock_observations import (
    create_blob_observations,
    create_block_matrix,
    create_label_map,
    create_observations,
)

__all__ = [
    "create_blob_observations",
    "create_block_matrix",
    "create_label_map",
    "create_observations",
]
