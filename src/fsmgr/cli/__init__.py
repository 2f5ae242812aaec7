"""
fsmgr CLI - Command-line interface for formatting and resizing partitions.
"""

from fsmgr.cli.main import cli, main

__all__ = ["cli", "main"]
