"""
Command-line interface for configkit.
"""

from configkit.cli.parser import CLI, main

__all__ = ["CLI", "main"]
