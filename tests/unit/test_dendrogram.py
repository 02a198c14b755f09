"""Unit tests for observations, distances and dendrogram construction."""

import pytest
import numpy as np
from scipy import sparse
from scipy.cluster.hierarchy import linkage

from sc_cluster.core.clustering import (
    AgglomerativeTree,
    Branch,
    Leaf,
    build_dendrogram,
    euclidean_distance,
    make_observations,
    observation_matrix,
    pairwise_distances,
)
from sc_cluster.core.errors import InvalidInput
from tests.fixtures import create_observations


class TestMakeObservations:
    """Tests for pairing identifiers with matrix rows."""

    def test_rows_keep_input_order(self):
        """Test identifiers and rows stay aligned."""
        obs = make_observations(["x", "y"], [[1, 2], [3, 4]])
        assert [o.identifier for o in obs] == ["x", "y"]
        assert [o.row for o in obs] == [0, 1]
        np.testing.assert_array_equal(obs[1].features, [3.0, 4.0])

    def test_sparse_matrix(self):
        """Test sparse input is densified per row."""
        matrix = sparse.csr_matrix(np.array([[0.0, 1.0], [2.0, 0.0]]))
        obs = make_observations(["x", "y"], matrix)
        np.testing.assert_array_equal(obs[0].features, [0.0, 1.0])

    def test_projection(self):
        """Test projections are attached as tuples."""
        obs = make_observations(["x"], [[1, 2]], projections=[[0.5, 0.25]])
        assert obs[0].projection == (0.5, 0.25)

    def test_empty_raises(self):
        """Test empty input is rejected."""
        with pytest.raises(InvalidInput):
            make_observations([], np.empty((0, 3)))

    def test_length_mismatch_raises(self):
        """Test identifier count must match rows."""
        with pytest.raises(InvalidInput, match="identifiers"):
            make_observations(["x"], [[1, 2], [3, 4]])

    def test_duplicate_identifier_raises(self):
        """Test duplicate identifiers are rejected."""
        with pytest.raises(InvalidInput, match="Duplicate"):
            make_observations(["x", "x"], [[1, 2], [3, 4]])

    def test_non_finite_raises(self):
        """Test NaN features are rejected with the offending cell."""
        with pytest.raises(InvalidInput, match="'y'"):
            make_observations(["x", "y"], [[1, 2], [np.nan, 4]])

    def test_observation_matrix_dimension_mismatch(self):
        """Test ragged feature vectors are rejected."""
        a = make_observations(["a"], [[1.0, 2.0]])
        b = make_observations(["b"], [[1.0, 2.0, 3.0]])
        with pytest.raises(InvalidInput, match="dimension"):
            observation_matrix(a + b)


class TestDistances:
    """Tests for distance helpers."""

    def test_euclidean(self):
        """Test Euclidean distance of a 3-4-5 triangle."""
        assert euclidean_distance(np.array([0, 0]), np.array([3, 4])) == pytest.approx(5.0)

    def test_pairwise_symmetric(self, random_matrix):
        """Test the distance matrix is symmetric with a zero diagonal."""
        dist = pairwise_distances(random_matrix)
        np.testing.assert_allclose(dist, dist.T)
        np.testing.assert_allclose(np.diag(dist), 0.0)

    def test_single_row(self):
        """Test a single row gives a 1x1 zero matrix."""
        assert pairwise_distances(np.ones((1, 3))).shape == (1, 1)

    def test_degenerate_distance_names_pair(self):
        """Test correlation distance over a constant row is rejected."""
        features = np.array([[1.0, 1.0, 1.0], [1.0, 2.0, 3.0], [3.0, 1.0, 2.0]])
        with pytest.raises(InvalidInput, match="'a' and 'b'"):
            pairwise_distances(features, metric="correlation", identifiers=["a", "b", "c"])


class TestBuildDendrogram:
    """Tests for complete-linkage dendrogram construction."""

    def test_single_observation(self, single_point):
        """Test one observation gives a leaf root and no branches."""
        tree = build_dendrogram(single_point)
        assert isinstance(tree, AgglomerativeTree)
        assert isinstance(tree.root, Leaf)
        assert tree.distances() == []
        assert tree.n_leaves == 1

    def test_empty_raises(self):
        """Test an empty observation set is rejected."""
        with pytest.raises(InvalidInput):
            build_dendrogram([])

    def test_four_points_structure(self, four_points):
        """Test the two pairs merge first and the root joins them."""
        tree = build_dendrogram(four_points)
        assert tree.n_leaves == 4
        assert tree.n_branches == 3
        assert [o.identifier for o in tree.observations()] == ["a", "b", "c", "d"]
        np.testing.assert_allclose(tree.distances(), [np.sqrt(221.0), 1.0, 1.0])

    def test_left_child_holds_lower_row(self, four_points):
        """Test the cluster with the lower first row is the left child."""
        tree = build_dendrogram(four_points)
        left = tree.root.left
        assert isinstance(left, Branch)
        assert left.left.observation.identifier == "a"
        assert left.right.observation.identifier == "b"

    def test_tie_break_prefers_lowest_pair(self, line_points):
        """Test tied merges resolve to the lowest (first_row_a, first_row_b)."""
        tree = build_dendrogram(line_points)
        # c0-c1 merge first, then c2-c3, then the root.
        assert tree.root.left.left.observation.identifier == "c0"
        assert tree.root.left.right.observation.identifier == "c1"
        assert tree.root.right.left.observation.identifier == "c2"
        assert tree.distances() == pytest.approx([3.0, 1.0, 1.0])

    def test_deterministic(self, line_points):
        """Test repeated builds give identical merge distances and order."""
        first = build_dendrogram(line_points)
        second = build_dendrogram(line_points)
        assert first.distances() == second.distances()
        assert [o.identifier for o in first.observations()] == [
            o.identifier for o in second.observations()
        ]

    def test_matches_scipy_heights(self, random_matrix):
        """Test merge heights agree with scipy's complete linkage."""
        obs = create_observations(random_matrix)
        tree = build_dendrogram(obs)
        expected = np.sort(linkage(random_matrix, method="complete")[:, 2])
        np.testing.assert_allclose(np.sort(tree.distances()), expected)

    def test_every_leaf_once(self, random_matrix):
        """Test every observation appears exactly once among the leaves."""
        obs = create_observations(random_matrix)
        tree = build_dendrogram(obs)
        ids = [o.identifier for o in tree.observations()]
        assert sorted(ids) == sorted(o.identifier for o in obs)

    def test_custom_metric(self, four_points):
        """Test a callable metric is used for merge distances."""
        tree = build_dendrogram(
            four_points, metric=lambda x, y: float(np.abs(x - y).sum())
        )
        np.testing.assert_allclose(sorted(tree.distances()), [1.0, 1.0, 21.0])
