"""Configuration classes for the clustering module.

All clustering parameters are configurable from YAML.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

METHODS = ("hclust", "hspec", "hdbscan")


@dataclass
class HierarchicalConfig:
    """Configuration for complete-linkage hierarchical clustering.

    Attributes
    ----------
    metric : str
        Distance metric name understood by scipy (default: euclidean)
    cut_quantile : float
        Quantile of merge distances used as the automatic cut threshold
    extra_cuts : List[float]
        Additional thresholds for multi-resolution membership
    """

    metric: str = "euclidean"
    cut_quantile: float = 0.9
    extra_cuts: List[float] = field(default_factory=list)


@dataclass
class SpectralConfig:
    """Configuration for recursive spectral partitioning.

    Attributes
    ----------
    normalization : str
        ``b1`` (row normalization) or ``none``
    min_size : int
        Smallest group a split may produce
    max_depth : int, optional
        Maximum recursion depth (unbounded if None)
    """

    normalization: str = "b1"
    min_size: int = 1
    max_depth: Optional[int] = None


@dataclass
class DensityConfig:
    """Configuration for density clustering.

    Attributes
    ----------
    min_points : int
        Minimum cluster size handed to HDBSCAN
    """

    min_points: int = 5


@dataclass
class DiversityConfig:
    """Configuration for per-cluster diversity.

    Attributes
    ----------
    order : float
        Hill number order (0 = richness, 1 = exp(Shannon))
    """

    order: float = 1.0


@dataclass
class ClusterRunConfig:
    """Master configuration for one clustering run.

    Attributes
    ----------
    method : str
        ``hclust``, ``hspec`` or ``hdbscan``
    hierarchical : HierarchicalConfig
        Agglomerative clustering configuration
    spectral : SpectralConfig
        Spectral partitioning configuration
    density : DensityConfig
        Density clustering configuration
    diversity : DiversityConfig
        Diversity configuration
    """

    method: str = "hclust"
    hierarchical: HierarchicalConfig = field(default_factory=HierarchicalConfig)
    spectral: SpectralConfig = field(default_factory=SpectralConfig)
    density: DensityConfig = field(default_factory=DensityConfig)
    diversity: DiversityConfig = field(default_factory=DiversityConfig)

    def __post_init__(self):
        if self.method not in METHODS:
            raise ValueError(f"Unknown clustering method {self.method!r}; expected one of {METHODS}")

    @classmethod
    def from_yaml(cls, path: Path) -> "ClusterRunConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        # Handle nested cluster section
        if "cluster" in data:
            data = data["cluster"]

        return cls(
            method=data.get("method", "hclust"),
            hierarchical=HierarchicalConfig(**data.get("hierarchical", {})),
            spectral=SpectralConfig(**data.get("spectral", {})),
            density=DensityConfig(**data.get("density", {})),
            diversity=DiversityConfig(**data.get("diversity", {})),
        )

    @classmethod
    def default(cls) -> "ClusterRunConfig":
        """Create default configuration."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "method": self.method,
            "hierarchical": {
                "metric": self.hierarchical.metric,
                "cut_quantile": self.hierarchical.cut_quantile,
                "extra_cuts": list(self.hierarchical.extra_cuts),
            },
            "spectral": {
                "normalization": self.spectral.normalization,
                "min_size": self.spectral.min_size,
                "max_depth": self.spectral.max_depth,
            },
            "density": {
                "min_points": self.density.min_points,
            },
            "diversity": {
                "order": self.diversity.order,
            },
        }
