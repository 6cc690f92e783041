"""
Directory layout for ToolchainCheck.

ToolchainCheck keeps one per-user directory holding the installation record
file and its lock:

    ~/.toolchaincheck/
        installations.json
        lock/
            installations.lock
"""

import os
from pathlib import Path

from toolchaincheck.core.exceptions import ToolchainCheckError

DATA_DIR_ENV = "TOOLCHAINCHECK_HOME"


class DirectoryError(ToolchainCheckError):
    """Raised when the data directory cannot be determined."""

    pass


def get_data_dir() -> Path:
    """
    Get the per-user data directory path.

    The TOOLCHAINCHECK_HOME environment variable overrides the default.

    Returns:
        Path: The data directory path.
            - Windows: %USERPROFILE%\\.toolchaincheck
            - Linux/macOS: ~/.toolchaincheck/
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)

    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine data directory."
            )
        return Path(user_profile) / ".toolchaincheck"
    return Path.home() / ".toolchaincheck"


def get_records_file() -> Path:
    """Default location of the JSON installation record file."""
    return get_data_dir() / "installations.json"
