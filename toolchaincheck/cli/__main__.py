"""
Entry point for running ToolchainCheck CLI as a module.

Usage: python -m toolchaincheck.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
