"""
Toolchain/host compatibility table.

Maps each toolchain release to the range of host versions it supports. The
table loads from an embedded JSON file (the Rtools/R table by default) or a
user-supplied one, and answers two questions:

- does a candidate's toolchain version support the current host version?
- which toolchain version should the user install for this host?

Example:
    >>> table = CompatibilityTable.load()
    >>> table.most_recent_applicable(Version("4.3.1"))
    Version('4.0')
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from toolchaincheck.core.exceptions import (
    CompatibilityTableError,
    InvalidVersionError,
)
from toolchaincheck.core.versions import Version
from toolchaincheck.toolchain.candidates import Candidate, VersionedCandidate

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT = "Rtools"


@dataclass(frozen=True)
class CompatibilityEntry:
    """Supported host version range for one toolchain release."""

    toolchain_version: Version
    """Toolchain release identifier (e.g., 4.0)"""

    min_host_version: Version
    """Oldest supported host version (inclusive)"""

    max_host_version: Version
    """Newest supported host version (inclusive)"""

    bin_paths: Sequence[str] = field(default_factory=tuple)
    """Installation sub-directories holding the toolchain executables"""

    def __post_init__(self):
        if self.min_host_version > self.max_host_version:
            raise CompatibilityTableError(
                f"Invalid range for {self.toolchain_version}: "
                f"{self.min_host_version} > {self.max_host_version}"
            )

    def contains(self, host_version: Version) -> bool:
        """True if ``host_version`` lies within the range, both ends inclusive."""
        return self.min_host_version <= host_version <= self.max_host_version


class CompatibilityTable:
    """
    Ordered compatibility table, ascending by toolchain version.

    Declared order matters: it breaks ties when several installed releases
    are compatible, and ``most_recent_applicable`` scans it backwards.
    """

    def __init__(
        self, entries: Sequence[CompatibilityEntry], product: str = DEFAULT_PRODUCT
    ):
        """
        Initialize table.

        Args:
            entries: Entries in ascending toolchain version order
            product: Product name used in recommendations

        Raises:
            CompatibilityTableError: If entries are not strictly ascending
        """
        self.product = product
        self._entries: List[CompatibilityEntry] = list(entries)
        self._index: Dict[Version, int] = {}

        previous: Optional[Version] = None
        for position, entry in enumerate(self._entries):
            version = entry.toolchain_version
            if previous is not None and not version > previous:
                raise CompatibilityTableError(
                    f"Compatibility table must be in ascending toolchain order: "
                    f"{version} follows {previous}"
                )
            self._index[version] = position
            previous = version

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "CompatibilityTable":
        """
        Load table from a JSON file.

        Args:
            path: JSON file path. If None, uses embedded compatibility.json

        Raises:
            CompatibilityTableError: If file cannot be loaded or parsed
        """
        path = Path(path) if path else cls._get_default_table_path()

        if not path.exists():
            raise CompatibilityTableError(f"Compatibility table not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CompatibilityTableError(
                f"Invalid JSON in compatibility table: {e}\nFile: {path}"
            ) from e
        except OSError as e:
            raise CompatibilityTableError(
                f"Failed to load compatibility table: {e}\nFile: {path}"
            ) from e

        if not isinstance(data, dict) or "compatibility" not in data:
            raise CompatibilityTableError(
                f"Invalid table structure: missing 'compatibility' key\nFile: {path}"
            )

        table = cls.from_list(
            data["compatibility"], product=data.get("product", DEFAULT_PRODUCT)
        )
        logger.debug(f"Loaded compatibility table with {len(table)} entries from {path}")
        return table

    @classmethod
    def from_list(
        cls, rows: List[Dict[str, Any]], product: str = DEFAULT_PRODUCT
    ) -> "CompatibilityTable":
        """
        Build table from a list of mappings.

        Each row needs ``version``, ``host_min`` and ``host_max``;
        ``bin_paths`` is optional.
        """
        if not isinstance(rows, list):
            raise CompatibilityTableError("Compatibility table must be a list")

        entries = []
        for row in rows:
            try:
                bin_paths = row.get("bin_paths", ["bin"])
                if isinstance(bin_paths, str):
                    bin_paths = [bin_paths]
                entries.append(
                    CompatibilityEntry(
                        toolchain_version=Version(str(row["version"])),
                        min_host_version=Version(str(row["host_min"])),
                        max_host_version=Version(str(row["host_max"])),
                        bin_paths=tuple(bin_paths),
                    )
                )
            except KeyError as e:
                raise CompatibilityTableError(
                    f"Compatibility entry missing required field {e}: {row}"
                ) from e
            except (InvalidVersionError, AttributeError, TypeError) as e:
                raise CompatibilityTableError(
                    f"Invalid compatibility entry {row}: {e}"
                ) from e

        return cls(entries, product=product)

    @staticmethod
    def _get_default_table_path() -> Path:
        return Path(__file__).parent.parent / "data" / "compatibility.json"

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CompatibilityEntry]:
        return iter(self._entries)

    @property
    def entries(self) -> List[CompatibilityEntry]:
        return list(self._entries)

    def range_for(
        self, toolchain_version: Union[Version, str, None]
    ) -> Optional[CompatibilityEntry]:
        """
        Look up the supported host range for a toolchain version.

        Returns:
            The entry, or None for unknown (or unparseable) versions
        """
        if toolchain_version is None:
            return None
        try:
            version = Version.coerce(toolchain_version)
        except InvalidVersionError:
            return None

        position = self._index.get(version)
        return self._entries[position] if position is not None else None

    def order_of(self, toolchain_version: Version) -> Optional[int]:
        """Declared position of a toolchain version, None if not in the table."""
        return self._index.get(toolchain_version)

    def is_compatible(self, candidate: Optional[Candidate], host_version: Version) -> bool:
        """
        Check a candidate against the host version.

        Unversioned candidates and versions missing from the table are never
        compatible.
        """
        if not isinstance(candidate, VersionedCandidate):
            return False

        entry = self.range_for(candidate.version)
        if entry is None:
            return False
        return entry.contains(host_version)

    def most_recent_applicable(self, host_version: Version) -> Optional[Version]:
        """
        Newest declared toolchain version whose range contains the host.

        Used for the "please install" recommendation only.
        """
        for entry in reversed(self._entries):
            if entry.contains(host_version):
                return entry.toolchain_version
        return None

    def recommendation(self, host_version: Version) -> str:
        """Human-readable name of the toolchain release to install."""
        version = self.most_recent_applicable(host_version)
        if version is None:
            return f"the appropriate version of {self.product}"
        return f"{self.product} {version}"


__all__ = [
    "CompatibilityEntry",
    "CompatibilityTable",
    "DEFAULT_PRODUCT",
]
