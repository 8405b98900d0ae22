"""Command-line interface for erythroid-ir.

Example Usage
-------------
    # From command line:
    erythroid-ir --help
    erythroid-ir run -r retention.tsv -t ir_test.tsv -o out/
    erythroid-ir summarize -r retention.tsv -t ir_test.tsv -o no_filter_summary.tsv
    erythroid-ir show-config
"""

from .main import cli, main

__all__ = [
    "cli",
    "main",
]
