"""
Entry point for running ToolchainCheck CLI as a module.

Usage: python -m toolchaincheck [command] [options]
"""

from toolchaincheck.cli.parser import main

if __name__ == "__main__":
    main()
