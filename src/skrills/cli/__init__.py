"""
CLI module for Skrills.

Provides the command-line interface using Click.
"""

from skrills.cli.main import cli, main

__all__ = ["main", "cli"]
