"""
Entry point for running configkit as a module.

Usage: python -m configkit [options]
"""

from configkit.cli.parser import main

if __name__ == "__main__":
    main()
