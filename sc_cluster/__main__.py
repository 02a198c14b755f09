"""Allow ``python -m sc_cluster``."""

from .cli import main

main()
