"""
The host system consuming the toolchain.

For the default profile the host is R: its version decides which toolchain
release is compatible, and ``R CMD config CC`` reports the compiler R was
configured to build with.
"""

import logging
import os
import re
import subprocess
from typing import List, Optional, Sequence

from toolchaincheck.core.exceptions import ConfigError, InvalidVersionError
from toolchaincheck.core.versions import Version

logger = logging.getLogger(__name__)

HOST_VERSION_ENV = "TOOLCHAINCHECK_HOST_VERSION"

_VERSION_OUTPUT_RE = re.compile(r"\bversion (\d+\.\d+(?:\.\d+)*)", re.IGNORECASE)


class HostEnvironment:
    """
    Queries the host system for its version and configured compiler.

    Example:
        >>> host = HostEnvironment(command="R", version="4.3.1")
        >>> host.host_version()
        Version('4.3.1')
    """

    def __init__(
        self,
        command: str = "R",
        name: str = "R",
        version: Optional[str] = None,
        config_args: Sequence[str] = ("CMD", "config", "CC"),
        timeout: float = 10,
    ):
        """
        Initialize host environment.

        Args:
            command: Host executable
            name: Display name used in diagnostics
            version: Fixed host version; skips detection when given
            config_args: Arguments that make the host print its compiler command
            timeout: Seconds to wait for each host invocation
        """
        self.command = command
        self.name = name
        self.configured_version = version
        self.config_args: List[str] = list(config_args)
        self.timeout = timeout
        self._detected: Optional[Version] = None

    def _run(self, args: List[str]) -> Optional[str]:
        try:
            result = subprocess.run(
                [self.command] + args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.debug(f"Timeout running {self.command} {' '.join(args)}")
            return None
        except OSError as e:
            logger.debug(f"Failed to run {self.command}: {e}")
            return None

        if result.returncode != 0:
            logger.debug(
                f"{self.command} {' '.join(args)} returned {result.returncode}"
            )
            return None
        return result.stdout + result.stderr

    def host_version(self) -> Version:
        """
        Version of the host, fixed for the life of this object.

        Precedence: TOOLCHAINCHECK_HOST_VERSION, configured version, then
        ``<command> --version``.

        Raises:
            ConfigError: If no version can be determined
        """
        override = os.environ.get(HOST_VERSION_ENV) or self.configured_version
        if override:
            try:
                return Version(override)
            except InvalidVersionError as e:
                raise ConfigError(f"Invalid host version {override!r}: {e}") from e

        if self._detected is None:
            output = self._run(["--version"])
            match = _VERSION_OUTPUT_RE.search(output or "")
            if not match:
                raise ConfigError(
                    f"Cannot determine {self.name} version from '{self.command} --version'. "
                    f"Set host.version in the configuration or {HOST_VERSION_ENV}."
                )
            self._detected = Version(match.group(1))
            logger.debug(f"Detected {self.name} {self._detected}")

        return self._detected

    def current_compiler_command(self) -> Optional[str]:
        """
        The compiler invocation the host was configured with, or None.

        Only the first non-empty output line is returned, stripped.
        """
        if not self.config_args:
            return None

        output = self._run(self.config_args)
        if not output:
            return None

        for line in output.splitlines():
            line = line.strip()
            if line:
                return line
        return None


__all__ = ["HostEnvironment", "HOST_VERSION_ENV"]
