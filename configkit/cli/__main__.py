"""
Entry point for running the configkit CLI as a module.

Usage: python -m configkit.cli [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
