"""
Platform detection for ToolchainCheck.

The resolver only applies on platforms where the toolchain concept exists
(Windows for the default Rtools profile). Everywhere else resolution is a
silent no-op.

Usage:
    from toolchaincheck.core.platform import detect_platform, is_target_platform

    platform_info = detect_platform()
    if is_target_platform(["windows"]):
        ...
"""

import functools
import platform
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass
class PlatformInfo:
    """
    Platform information.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'windows-x64').

        Example:
            >>> PlatformInfo('windows', 'x64').platform_string()
            'windows-x64'
        """
        return f"{self.os}-{self.arch}"

    @property
    def executable_suffix(self) -> str:
        """Suffix appended to executable names ('.exe' on Windows)."""
        return ".exe" if self.os == "windows" else ""

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the raw
        lower-cased system name for anything else
    """
    system = platform.system().lower()

    if system == "windows" or system.startswith(("cygwin", "msys", "mingw")):
        return "windows"
    elif system == "darwin":
        return "macos"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    return machine


def is_target_platform(
    platforms: Iterable[str], info: Optional[PlatformInfo] = None
) -> bool:
    """
    Check whether toolchain resolution applies on this platform.

    Args:
        platforms: OS names the toolchain exists on (e.g., ['windows'])
        info: PlatformInfo to check. If None, detects current platform.

    Returns:
        True if the platform's OS is one of ``platforms``
    """
    if info is None:
        info = detect_platform()
    return info.os in {p.lower() for p in platforms}


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "is_target_platform",
    "clear_platform_cache",
]
