"""
ToolchainCheck - find a compatible native build toolchain.

Determines whether a toolchain compatible with the host (Rtools for R by
default) is installed, looking at the host's build configuration, the
executable search path and recorded installations.
"""

from toolchaincheck.service import (
    ToolchainService,
    has_toolchain,
    find_toolchain,
    setup_toolchain,
    toolchain_path,
    require_compatible_toolchain,
)

__version__ = "0.1.0"

__all__ = [
    "ToolchainService",
    "has_toolchain",
    "find_toolchain",
    "setup_toolchain",
    "toolchain_path",
    "require_compatible_toolchain",
    "__version__",
]
