"""
Candidate installations discovered by evidence sources.

A candidate is one piece of evidence that a toolchain might be installed at a
given location. It either carries an authoritative version
(:class:`VersionedCandidate`) or not (:class:`UnversionedCandidate`, e.g. a
user-supplied compiler on the path that is not the vendored toolchain).
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from toolchaincheck.core.versions import Version


class Provenance(str, Enum):
    """Which evidence source produced a candidate."""

    CONFIG = "config"
    PATH = "path"
    REGISTRY = "registry"


@dataclass(frozen=True)
class VersionedCandidate:
    """Candidate whose toolchain version is known."""

    path: Path
    version: Version
    provenance: Provenance

    def __str__(self) -> str:
        return f"{self.version} at {self.path} ({self.provenance.value})"


@dataclass(frozen=True)
class UnversionedCandidate:
    """Candidate found without an authoritative version marker."""

    path: Path
    provenance: Provenance

    @property
    def version(self) -> None:
        return None

    def __str__(self) -> str:
        return f"unknown version at {self.path} ({self.provenance.value})"


Candidate = Union[VersionedCandidate, UnversionedCandidate]


def make_candidate(
    path: Path, version: Optional[Version], provenance: Provenance
) -> Candidate:
    """
    Build the right candidate variant for an optional version.

    Args:
        path: Installation root
        version: Version read from disk or registry, if any
        provenance: Source that found the installation

    Returns:
        VersionedCandidate when ``version`` is given, UnversionedCandidate otherwise
    """
    if version is None:
        return UnversionedCandidate(path=Path(path), provenance=provenance)
    return VersionedCandidate(path=Path(path), version=version, provenance=provenance)


__all__ = [
    "Provenance",
    "Candidate",
    "VersionedCandidate",
    "UnversionedCandidate",
    "make_candidate",
]
