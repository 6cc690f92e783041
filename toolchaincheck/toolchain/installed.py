"""
Read the version actually installed in a toolchain directory.

An installation root carries a marker stamp (``Rtools.txt``) and a version
file (``VERSION.txt``) whose text reads, e.g., ``Rtools version 4.0.0.28``.
The reader goes to disk every time, independent of anything a registry
recorded, so callers can detect drift.
"""

import logging
import re
from pathlib import Path
from typing import Callable, Optional, Union

from toolchaincheck.core.exceptions import InvalidVersionError
from toolchaincheck.core.filesystem import file_exists, read_text_lines
from toolchaincheck.core.versions import Version

logger = logging.getLogger(__name__)

DEFAULT_STAMP_FILE = "Rtools.txt"
DEFAULT_VERSION_FILE = "VERSION.txt"


class InstalledVersionReader:
    """
    Re-derives a toolchain's version from its on-disk version file.

    Example:
        >>> reader = InstalledVersionReader(product="Rtools")
        >>> reader.actual_version(Path("C:/rtools40"))
        Version('4.0')
    """

    def __init__(
        self,
        product: str = "Rtools",
        stamp_file: str = DEFAULT_STAMP_FILE,
        version_file: str = DEFAULT_VERSION_FILE,
        debug: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize reader.

        Args:
            product: Product name expected at the start of the version line
            stamp_file: File whose presence marks an installation root
            version_file: File holding the version line
            debug: Optional debug sink for diagnostic output
        """
        self.product = product
        self.stamp_file = stamp_file
        self.version_file = version_file
        self._debug = debug or logger.debug
        self.pattern = re.compile(
            rf"^{re.escape(product)} version (\d+\.\d+)\.[0-9.]+$"
        )

    def has_stamp(self, path: Union[str, Path]) -> bool:
        """True if ``path`` carries the installation marker stamp."""
        return file_exists(Path(path) / self.stamp_file)

    def actual_version(self, path: Union[str, Path]) -> Optional[Version]:
        """
        Read the installed version at ``path``.

        Args:
            path: Installation root

        Returns:
            major.minor Version, or None when the directory, stamp or version
            file is missing or the version text does not match
        """
        root = Path(path)

        if not self.has_stamp(root):
            self._debug(f"No {self.stamp_file} in {root}")
            return None

        version_path = root / self.version_file
        if not file_exists(version_path):
            self._debug(f"No {self.version_file} in {root}")
            return None

        lines = read_text_lines(version_path)
        if lines is None:
            return None

        self._debug(f"{self.version_file}: {' '.join(lines)}")

        for line in lines:
            match = self.pattern.match(line.strip())
            if match:
                try:
                    return Version(match.group(1))
                except InvalidVersionError:
                    return None

        self._debug(f"Unrecognized version text in {version_path}")
        return None


__all__ = [
    "InstalledVersionReader",
    "DEFAULT_STAMP_FILE",
    "DEFAULT_VERSION_FILE",
]
