"""Unit tests for clustering configuration, engine and export."""

import json

import pytest
import numpy as np
import pandas as pd

from sc_cluster.core.clustering import (
    ClusteringEngine,
    ClusterResults,
    ClusterRunConfig,
    HierarchicalConfig,
    SpectralConfig,
)
from sc_cluster.core.clustering.export import (
    build_summary,
    cluster_list_to_frame,
    format_path,
    write_cluster_results,
)
from sc_cluster.core.diversity import diversity_to_frame
from tests.fixtures import create_label_map, create_observations


def stub_density(matrix, min_points):
    """Two clusters split at the feature mean; nothing is noise."""
    labels = np.where(matrix[:, 0] < matrix[:, 0].mean(), 1, 2)
    return labels, np.full(matrix.shape[0], 0.75)


class TestClusterRunConfig:
    """Tests for ClusterRunConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = ClusterRunConfig.default()
        assert config.method == "hclust"
        assert config.hierarchical.metric == "euclidean"
        assert config.hierarchical.cut_quantile == 0.9
        assert config.hierarchical.extra_cuts == []
        assert config.spectral.normalization == "b1"
        assert config.density.min_points == 5
        assert config.diversity.order == 1.0

    def test_unknown_method(self):
        """Test unknown methods are rejected."""
        with pytest.raises(ValueError, match="Unknown clustering method"):
            ClusterRunConfig(method="kmeans")

    def test_from_yaml(self, tmp_path):
        """Test loading config from YAML with a cluster section."""
        yaml_content = """
cluster:
  method: hspec
  spectral:
    normalization: none
    min_size: 3
  diversity:
    order: 2.0
"""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml_content)

        config = ClusterRunConfig.from_yaml(config_path)
        assert config.method == "hspec"
        assert config.spectral.normalization == "none"
        assert config.spectral.min_size == 3
        assert config.diversity.order == 2.0
        assert config.density.min_points == 5

    def test_from_empty_yaml(self, tmp_path):
        """Test an empty file gives defaults."""
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")
        assert ClusterRunConfig.from_yaml(config_path).to_dict() == ClusterRunConfig().to_dict()

    def test_to_dict(self):
        """Test conversion to dictionary."""
        config = ClusterRunConfig(hierarchical=HierarchicalConfig(extra_cuts=[2.0]))
        data = config.to_dict()
        assert data["method"] == "hclust"
        assert data["hierarchical"]["extra_cuts"] == [2.0]
        assert data["spectral"]["max_depth"] is None


class TestClusteringEngineHierarchical:
    """Tests for the hclust path."""

    def test_four_points(self, four_points):
        """Test the automatic cut separates the two pairs."""
        results = ClusteringEngine().run(four_points, method="hclust")
        assert isinstance(results, ClusterResults)
        assert results.method == "hclust"
        assert results.threshold == pytest.approx(1.0 + 0.8 * (np.sqrt(221.0) - 1.0))
        assert results.to_pairs() == [("a", (1,)), ("b", (1,)), ("c", (2,)), ("d", (2,))]
        assert results.cluster_sizes() == {1: 2, 2: 2}

    def test_single_observation(self, single_point):
        """Test one observation gives threshold 0 and cluster 1."""
        results = ClusteringEngine().hierarchical(single_point)
        assert results.threshold == 0.0
        assert results.to_pairs() == [("only", (1,))]

    def test_extra_cuts(self, four_points):
        """Test extra thresholds add finer path levels."""
        results = ClusteringEngine().hierarchical(four_points, extra_cuts=[0.5])
        assert results.to_pairs() == [
            ("a", (1, 3)),
            ("b", (1, 4)),
            ("c", (2, 5)),
            ("d", (2, 6)),
        ]
        assert results.metadata["cuts"][-1] == 0.5

    def test_nested(self, four_points):
        """Test nested paths through the whole dendrogram."""
        engine = ClusteringEngine()
        nested = engine.nested(engine.hierarchical(four_points))
        assert [a.path for a in nested.assignments] == [(1, 2, 3), (1, 2, 4), (1, 5, 6), (1, 5, 7)]
        assert nested.threshold is None
        assert nested.metadata["nested"] is True

    def test_nested_summary_drops_cut(self, four_points):
        """Test nested results do not report the single-cut threshold."""
        engine = ClusteringEngine()
        summary = build_summary(engine.nested(engine.hierarchical(four_points)))
        assert summary["nested"] is True
        assert "threshold" not in summary
        assert "cuts" not in summary

    def test_blob_purity(self, blobs):
        """Test no cluster mixes the two blobs."""
        observations, truth = blobs
        results = ClusteringEngine().run(observations)
        assert results.n_clusters >= 2
        truth_by_id = {o.identifier: t for o, t in zip(observations, truth)}
        members = {}
        for assignment in results.assignments:
            members.setdefault(assignment.innermost, set()).add(truth_by_id[assignment.identifier])
        assert all(len(blob_set) == 1 for blob_set in members.values())

    def test_unknown_method(self, four_points):
        """Test unknown methods are rejected at run time."""
        with pytest.raises(ValueError):
            ClusteringEngine().run(four_points, method="kmeans")


class TestClusteringEngineOtherPaths:
    """Tests for the hspec and hdbscan paths."""

    def test_spectral(self, block_observations):
        """Test the spectral path stores the graph and splits."""
        config = ClusterRunConfig(method="hspec", spectral=SpectralConfig(min_size=2))
        results = ClusteringEngine(config).run(block_observations)
        assert results.method == "hspec"
        assert results.n_clusters == 2
        assert len(results.metadata["cluster_graph"]) == 3
        assert len(results.metadata["splits"]) == 1
        assert {a.path for a in results.assignments} == {(1, 2), (1, 3)}

    def test_density(self, four_points):
        """Test the density path keeps the primitive's ids."""
        engine = ClusteringEngine(density_primitive=stub_density)
        results = engine.run(four_points, method="hdbscan")
        assert results.method == "hdbscan"
        assert results.to_pairs() == [("a", (1,)), ("b", (1,)), ("c", (2,)), ("d", (2,))]
        assert [d.probability for d in results.metadata["density"]] == [0.75] * 4

    def test_diversity(self, four_points):
        """Test diversity of the hclust clusters."""
        engine = ClusteringEngine()
        results = engine.run(four_points)
        labels = create_label_map(four_points, ["T", "B", "T", "T"])
        records = engine.diversity(results, labels)
        assert [r.cluster for r in records] == [1, 2]
        assert [r.diversity for r in records] == pytest.approx([2.0, 1.0])


class TestExport:
    """Tests for result export."""

    def test_format_path(self):
        """Test paths render with slashes."""
        assert format_path((1, 3, 5)) == "1/3/5"

    def test_cluster_list_frame(self, four_points):
        """Test the cluster list table."""
        results = ClusteringEngine().run(four_points)
        df = cluster_list_to_frame(results)
        assert list(df.columns) == ["cell", "cluster", "path"]
        assert df["cluster"].tolist() == [1, 1, 2, 2]

    def test_density_frame_has_probability(self, four_points):
        """Test density results carry a probability column."""
        results = ClusteringEngine(density_primitive=stub_density).density(four_points)
        assert cluster_list_to_frame(results)["probability"].tolist() == [0.75] * 4

    def test_nested_density_probabilities_follow_cells(self):
        """Test probabilities stay with their cells after nested regrouping."""
        observations = create_observations([[float(i)] for i in range(5)])

        def primitive(matrix, min_points):
            return np.array([2, 1, 2, 1, 0]), np.array([0.1, 0.2, 0.3, 0.4, 0.5])

        engine = ClusteringEngine(density_primitive=primitive)
        results = engine.nested(engine.density(observations))
        df = cluster_list_to_frame(results)
        assert df["cell"].tolist() == ["c4", "c1", "c3", "c0", "c2"]
        by_cell = dict(zip(df["cell"], df["probability"]))
        assert by_cell == pytest.approx(
            {"c0": 0.1, "c1": 0.2, "c2": 0.3, "c3": 0.4, "c4": 0.5}
        )

    def test_summary(self, block_observations):
        """Test the summary includes split records for hspec."""
        config = ClusterRunConfig(method="hspec", spectral=SpectralConfig(min_size=2))
        summary = build_summary(ClusteringEngine(config).run(block_observations))
        assert summary["method"] == "hspec"
        assert summary["n_cells"] == 6
        assert summary["splits"][0]["sizes"] == [3, 3]
        assert "merge_distance_percentiles" not in summary

    def test_summary_merge_percentiles(self, four_points):
        """Test dendrogram summaries report merge-distance percentiles."""
        summary = build_summary(ClusteringEngine().run(four_points))
        percentiles = summary["merge_distance_percentiles"]
        assert set(percentiles) == {"p25", "p50", "p75", "p90"}
        assert percentiles["p50"] == pytest.approx(1.0)
        assert percentiles["p90"] == pytest.approx(summary["threshold"])

    def test_write_results(self, four_points, tmp_path):
        """Test all artifacts are written."""
        engine = ClusteringEngine()
        results = engine.run(four_points)
        labels = create_label_map(four_points, ["T", "B", "T", "T"])
        diversity = diversity_to_frame(engine.diversity(results, labels))

        written = write_cluster_results(results, tmp_path / "out", diversity=diversity)
        assert set(written) == {"cluster_list", "diversity", "summary"}

        cluster_list = pd.read_csv(written["cluster_list"])
        assert cluster_list["cell"].tolist() == ["a", "b", "c", "d"]
        summary = json.loads(written["summary"].read_text())
        assert summary["n_clusters"] == 2
        assert summary["cluster_sizes"] == {"1": 2, "2": 2}
        assert pd.read_csv(written["diversity"])["diversity"].tolist() == pytest.approx([2.0, 1.0])
