"""CLI commands for TradeMind.

This package provides the command-line interface for TradeMind,
including market views, the live feed, watchlists, and AI analysis.
"""

from trademind.cli.main import cli, main

__all__ = ["cli", "main"]
