"""Command-line interface for sc-cluster.

Provides the ``cluster`` command: load a matrix, cluster it, optionally
compute per-cluster label diversity, and write the results.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ..core.errors import ScClusterError


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Setup logging for CLI commands."""
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    return logging.getLogger("sc_cluster")


@click.group()
@click.version_option(version="0.1.0", prog_name="sc-cluster")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """sc-cluster: Hierarchical clustering of single-cell data.

    Examples:

        # Complete-linkage clustering with the automatic cut
        sc-cluster cluster --input matrix.csv --out clusters/

        # Recursive spectral clustering with label diversity
        sc-cluster cluster -i matrix.csv -o out/ --method hspec --labels labels.csv

        # Density clustering of a gene-by-cell table
        sc-cluster cluster -i genes_by_cells.csv -o out/ --method hdbscan --cells-as-columns
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["logger"] = setup_logging(verbose, debug)


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True),
              help="Observation matrix CSV (cells as rows, identifiers in first column)")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output directory")
@click.option("--config", "-c", type=click.Path(exists=True),
              help="Clustering configuration file (YAML)")
@click.option("--method", type=click.Choice(["hclust", "hspec", "hdbscan"]), default=None,
              help="Clustering method (overrides config)")
@click.option("--delimiter", default=",", help="CSV delimiter")
@click.option("--cells-as-columns", is_flag=True,
              help="Input is feature-by-cell and will be transposed")
@click.option("--projection-columns", default=None,
              help="Comma-separated pair of projection columns, e.g. 'x,y'")
@click.option("--labels", "labels_path", type=click.Path(exists=True), default=None,
              help="item,label CSV; enables per-cluster diversity")
@click.option("--order", type=float, default=None, help="Diversity order (overrides config)")
@click.option("--min-points", type=int, default=None, help="HDBSCAN minimum cluster size")
@click.option("--normalization", type=click.Choice(["b1", "none"]), default=None,
              help="Spectral normalization")
@click.option("--nested", is_flag=True,
              help="Report nested paths through the whole dendrogram (hclust)")
@click.option("--plot", is_flag=True, help="Plot clusters on the projection")
@click.option("--log-file", type=click.Path(), default=None, help="Also log to this file")
@click.pass_context
def cluster(
    ctx: click.Context,
    input_path: str,
    output_path: str,
    config: Optional[str],
    method: Optional[str],
    delimiter: str,
    cells_as_columns: bool,
    projection_columns: Optional[str],
    labels_path: Optional[str],
    order: Optional[float],
    min_points: Optional[int],
    normalization: Optional[str],
    nested: bool,
    plot: bool,
    log_file: Optional[str],
) -> None:
    """Cluster cells and write cluster_list.csv and summary.json."""
    logger = ctx.obj["logger"]

    from ..core.clustering import ClusteringEngine, ClusterRunConfig
    from ..core.clustering.export import write_cluster_results
    from ..core.diversity import diversity_to_frame
    from ..io import get_logger, load_label_map, load_observations, log_json, log_yaml

    if log_file:
        logger, actual_log = get_logger("sc_cluster", log_file)
        click.echo(f"Logging to: {actual_log}")

    cfg = ClusterRunConfig.from_yaml(Path(config)) if config else ClusterRunConfig()
    if method:
        cfg.method = method
    if order is not None:
        cfg.diversity.order = order
    if min_points is not None:
        cfg.density.min_points = min_points
    if normalization:
        cfg.spectral.normalization = normalization
    log_yaml(logger, cfg.to_dict(), title="Clustering configuration:")

    projections = projection_columns.split(",") if projection_columns else None

    try:
        observations = load_observations(
            input_path,
            delimiter=delimiter,
            cells_as_columns=cells_as_columns,
            projection_columns=projections,
        )
        logger.info("Loaded %d cells", len(observations))

        engine = ClusteringEngine(cfg, logger)
        results = engine.run(observations)
        if nested:
            results = engine.nested(results)

        diversity = None
        if labels_path:
            label_map = load_label_map(labels_path, delimiter=delimiter)
            diversity = diversity_to_frame(engine.diversity(results, label_map))
    except (ScClusterError, ValueError) as exc:
        logger.error("Clustering failed: %s", exc)
        raise click.ClickException(str(exc)) from exc

    written = write_cluster_results(results, output_path, diversity=diversity)
    log_json(Path(output_path) / "runs.jsonl", {"input": input_path, **cfg.to_dict()})

    if plot:
        from ..viz import plot_clusters

        figure = plot_clusters(results.assignments, Path(output_path) / "clusters.png")
        if figure is None:
            click.echo("No projection available; skipping plot", err=True)

    click.echo(f"Clustering complete: {results.n_clusters} clusters")
    click.echo(f"Output saved to: {written['cluster_list']}")


def main() -> None:
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
