"""
Core functionality for ToolchainCheck.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_data_dir,
    get_records_file,
    DirectoryError,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    is_target_platform,
    clear_platform_cache,
)

from .versions import Version

from .exceptions import (
    ToolchainCheckError,
    ConfigError,
    CompatibilityTableError,
    InvalidVersionError,
    RecordError,
    RecordLockTimeout,
    RecordNotFoundError,
    ToolchainRequiredError,
)

__all__ = [
    "get_data_dir",
    "get_records_file",
    "DirectoryError",
    "PlatformInfo",
    "detect_platform",
    "is_target_platform",
    "clear_platform_cache",
    "Version",
    "ToolchainCheckError",
    "ConfigError",
    "CompatibilityTableError",
    "InvalidVersionError",
    "RecordError",
    "RecordLockTimeout",
    "RecordNotFoundError",
    "ToolchainRequiredError",
]
