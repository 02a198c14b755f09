"""Clustering engine tying the three clustering paths together.

- ``hclust``: complete-linkage dendrogram cut at the automatic threshold
- ``hspec``: recursive spectral partitioning flattened as nested paths
- ``hdbscan``: density clustering, one flat level
"""

from typing import Any, Mapping, Optional, Sequence
import logging

from .config import ClusterRunConfig
from .cut import find_cut
from .dendrogram import build_dendrogram
from .density import DensityFn, density_cluster, density_grouping, density_to_assignments
from .spectral import BipartitionFn, SpectralPartitioner
from .tree import ClusterResults, Observation
from .walker import flatten_at_cuts, flatten_nested, graph_to_assignments, to_cluster_graph


class ClusteringEngine:
    """Clustering engine for single-cell observations.

    Parameters
    ----------
    config : ClusterRunConfig, optional
        Run configuration. If None, uses defaults.
    logger : logging.Logger, optional
        Logger instance. If None, creates default logger.
    density_primitive : callable, optional
        Replacement for the HDBSCAN primitive
    bipartition : callable, optional
        Replacement for the spectral bipartition primitive

    Example
    -------
    >>> from sc_cluster.core.clustering import ClusteringEngine, make_observations
    >>> engine = ClusteringEngine()
    >>> observations = make_observations(["a", "b", "c"], [[0, 0], [0, 1], [9, 9]])
    >>> results = engine.run(observations, method="hclust")
    >>> results.to_pairs()
    """

    def __init__(
        self,
        config: Optional[ClusterRunConfig] = None,
        logger: Optional[logging.Logger] = None,
        density_primitive: Optional[DensityFn] = None,
        bipartition: Optional[BipartitionFn] = None,
    ):
        self.config = config or ClusterRunConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.density_primitive = density_primitive
        self.bipartition = bipartition

    def run(
        self,
        observations: Sequence[Observation],
        method: Optional[str] = None,
        matrix: Any = None,
    ) -> ClusterResults:
        """Cluster observations with the configured (or given) method.

        Parameters
        ----------
        observations : Sequence[Observation]
            Observations in input order
        method : str, optional
            ``hclust``, ``hspec`` or ``hdbscan``. Uses config default if None.
        matrix : array-like or scipy.sparse matrix, optional
            Matrix for the spectral path, aligned with ``observations``

        Returns
        -------
        ClusterResults
            Per-observation cluster paths plus the grouping
        """
        method = method or self.config.method
        if method == "hclust":
            return self.hierarchical(observations)
        if method == "hspec":
            return self.spectral(observations, matrix=matrix)
        if method == "hdbscan":
            return self.density(observations)
        raise ValueError(f"Unknown clustering method: {method!r}")

    def hierarchical(
        self,
        observations: Sequence[Observation],
        metric: Optional[str] = None,
        cut_quantile: Optional[float] = None,
        extra_cuts: Optional[Sequence[float]] = None,
    ) -> ClusterResults:
        """Complete-linkage clustering cut at the automatic threshold.

        Parameters
        ----------
        observations : Sequence[Observation]
            Observations in input order
        metric : str, optional
            Distance metric. Uses config default if None.
        cut_quantile : float, optional
            Merge-distance quantile for the cut. Uses config default if None.
        extra_cuts : Sequence[float], optional
            Further thresholds for multi-resolution paths. Uses config
            default if None.

        Returns
        -------
        ClusterResults
            Results with ``threshold`` set to the automatic cut
        """
        cfg = self.config.hierarchical
        metric = metric if metric is not None else cfg.metric
        cut_quantile = cut_quantile if cut_quantile is not None else cfg.cut_quantile
        extra_cuts = list(extra_cuts if extra_cuts is not None else cfg.extra_cuts)

        tree = build_dendrogram(observations, metric=metric)
        threshold = find_cut(tree, cut_quantile)
        self.logger.info(
            "Cutting dendrogram at %.4f (quantile %.2f of %d merges)",
            threshold,
            cut_quantile,
            tree.n_branches,
        )
        assignments = flatten_at_cuts(tree, [threshold] + extra_cuts)
        results = ClusterResults(
            assignments=assignments,
            grouping=tree,
            method="hclust",
            threshold=threshold,
            metadata={"cuts": sorted({threshold, *extra_cuts}, reverse=True)},
        )
        self.logger.info("Hierarchical clustering produced %d clusters", results.n_clusters)
        return results

    def spectral(
        self,
        observations: Sequence[Observation],
        matrix: Any = None,
        normalization: Optional[str] = None,
    ) -> ClusterResults:
        """Recursive spectral partitioning with nested cluster paths.

        The cluster graph is stored in ``metadata["cluster_graph"]`` and the
        accepted splits in ``metadata["splits"]``.
        """
        cfg = self.config.spectral
        normalization = normalization if normalization is not None else cfg.normalization

        partitioner = SpectralPartitioner(
            bipartition=self.bipartition,
            min_size=cfg.min_size,
            max_depth=cfg.max_depth,
            logger=self.logger,
        )
        tree = partitioner.partition(observations, matrix=matrix, normalization=normalization)
        graph = to_cluster_graph(tree)
        results = ClusterResults(
            assignments=graph_to_assignments(graph),
            grouping=tree,
            method="hspec",
            metadata={"splits": tree.splits, "cluster_graph": graph},
        )
        self.logger.info(
            "Spectral clustering produced %d leaf clusters (%d graph nodes)",
            results.n_clusters,
            len(graph),
        )
        return results

    def density(
        self,
        observations: Sequence[Observation],
        min_points: Optional[int] = None,
    ) -> ClusterResults:
        """Density clustering; cluster ids keep the primitive's numbering.

        Per-cell membership probabilities are stored in
        ``metadata["density"]``.
        """
        min_points = min_points if min_points is not None else self.config.density.min_points
        density = density_cluster(observations, min_points=min_points, primitive=self.density_primitive)
        return ClusterResults(
            assignments=density_to_assignments(density),
            grouping=density_grouping(density),
            method="hdbscan",
            metadata={"density": density},
        )

    def nested(self, results: ClusterResults) -> ClusterResults:
        """Re-flatten the grouping behind ``results`` as nested paths.

        The single-cut threshold and cuts no longer describe the paths and
        are dropped; ``metadata["nested"]`` is set instead.
        """
        metadata = {k: v for k, v in results.metadata.items() if k != "cuts"}
        metadata["nested"] = True
        return ClusterResults(
            assignments=flatten_nested(results.grouping),
            grouping=results.grouping,
            method=results.method,
            metadata=metadata,
        )

    def diversity(
        self,
        results: ClusterResults,
        label_map: Mapping[str, str],
        order: Optional[float] = None,
    ) -> list:
        """Per-cluster label diversity for ``results``.

        Parameters
        ----------
        results : ClusterResults
            Clustering output
        label_map : Mapping[str, str]
            Cell identifier to label
        order : float, optional
            Hill number order. Uses config default if None.

        Returns
        -------
        List[DiversityRecord]
            One record per innermost cluster, ascending by id
        """
        from ..diversity import cluster_diversity

        order = order if order is not None else self.config.diversity.order
        return cluster_diversity(results, label_map, order=order)
