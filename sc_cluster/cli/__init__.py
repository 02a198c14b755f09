"""Command-line interface for sc-cluster.

Example Usage
-------------
    # From command line:
    sc-cluster --help
    sc-cluster cluster --input matrix.csv --out out/
    sc-cluster cluster --input matrix.csv --out out/ --method hspec --labels labels.csv
"""

__version__ = "0.1.0"

from .main import cli, main

__all__ = [
    "__version__",
    "cli",
    "main",
]
