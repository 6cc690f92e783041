"""
Evidence sources - discover toolchain installations.

Three probes, queried by the resolver in precedence order:

- BuildConfigProbe: the compiler the host was configured with
- PathProbe: marker binaries on the executable search path
- RegistryProbe: installation records (Windows registry, record file)

A probe never raises. Any error inside a probe is reported to the debug
sink and the probe contributes no evidence.
"""

import logging
import os
import shlex
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from toolchaincheck.core.filesystem import (
    file_exists,
    find_executable,
    search_path_directories,
)
from toolchaincheck.core.platform import detect_platform
from toolchaincheck.toolchain.candidates import (
    Candidate,
    Provenance,
    VersionedCandidate,
    make_candidate,
)
from toolchaincheck.toolchain.host import HostEnvironment
from toolchaincheck.toolchain.installed import InstalledVersionReader
from toolchaincheck.toolchain.records import RecordBackend
from toolchaincheck.toolchain.sinks import DiagnosticSink, LoggingDiagnosticSink

logger = logging.getLogger(__name__)

SearchPathProvider = Callable[[], List[Path]]


def _default_suffix() -> str:
    return detect_platform().executable_suffix


def _path_key(path: Path) -> str:
    return os.path.normcase(os.path.normpath(str(path)))


class EvidenceSource(ABC):
    """Base class for probes producing toolchain candidates."""

    name = "evidence"

    def __init__(self, sink: Optional[DiagnosticSink] = None):
        self.sink = sink or LoggingDiagnosticSink()

    def find(self) -> List[Candidate]:
        """
        Run the probe.

        Returns:
            Candidates found, possibly empty. Never raises.
        """
        try:
            candidates = self._find()
        except Exception as e:
            self.sink.debug(f"{self.name} probe failed: {e}")
            return []

        self.sink.debug(f"{self.name} probe found {len(candidates)} candidate(s)")
        return candidates

    @abstractmethod
    def _find(self) -> List[Candidate]:
        pass


class BuildConfigProbe(EvidenceSource):
    """
    Asks the host for its configured compiler.

    The compiler is expected at ``<root>/<subdir>/bin/<compiler>``, so the
    installation root sits ``depth`` levels above the executable. The root
    must carry the toolchain's marker stamp, otherwise the configured
    compiler is not the vendored toolchain and no evidence is produced.
    """

    name = "config"

    def __init__(
        self,
        host: HostEnvironment,
        reader: InstalledVersionReader,
        depth: int = 3,
        search_paths: SearchPathProvider = search_path_directories,
        suffix: Optional[str] = None,
        sink: Optional[DiagnosticSink] = None,
    ):
        super().__init__(sink)
        self.host = host
        self.reader = reader
        self.depth = depth
        self.search_paths = search_paths
        self.suffix = suffix

    def _compiler_path(self, command: str) -> Optional[Path]:
        try:
            tokens = shlex.split(command, posix=False)
        except ValueError:
            tokens = command.split()
        if not tokens:
            return None

        executable = tokens[0].strip('"').strip("'")
        path = Path(executable)
        if path.is_absolute() or len(path.parts) > 1:
            if file_exists(path):
                return path
            suffix = self.suffix if self.suffix is not None else _default_suffix()
            if suffix and file_exists(path.with_name(path.name + suffix)):
                return path.with_name(path.name + suffix)
            return None

        return find_executable(executable, self.search_paths(), suffix=self.suffix)

    def _find(self) -> List[Candidate]:
        command = self.host.current_compiler_command()
        if not command:
            self.sink.debug(f"{self.host.name} reported no compiler command")
            return []

        compiler = self._compiler_path(command)
        if compiler is None:
            self.sink.debug(f"Configured compiler not found: {command}")
            return []

        parents = compiler.parents
        if len(parents) < self.depth:
            return []
        root = parents[self.depth - 1]

        if not self.reader.has_stamp(root):
            self.sink.debug(f"{compiler} is not inside a {self.reader.product} installation")
            return []

        version = self.reader.actual_version(root)
        self.sink.debug(f"Configured compiler {compiler} belongs to {root}")
        return [make_candidate(root, version, Provenance.CONFIG)]


class PathProbe(EvidenceSource):
    """
    Searches the executable search path for the toolchain's marker binaries.

    Every directory holding the primary marker (``ls`` by default) names an
    installation root: the nearest ancestor, at most ``max_depth`` levels up,
    carrying the marker stamp (``<root>/bin`` and ``<root>/usr/bin`` both
    occur). Without a stamped ancestor the directory's parent is the root.
    The other markers (``gcc``) must be reachable somewhere on the path too,
    or nothing usable is installed. A root without a readable version file
    yields an unversioned candidate.
    """

    name = "path"

    def __init__(
        self,
        reader: InstalledVersionReader,
        binaries: Sequence[str] = ("ls", "gcc"),
        search_paths: SearchPathProvider = search_path_directories,
        suffix: Optional[str] = None,
        max_depth: int = 3,
        sink: Optional[DiagnosticSink] = None,
    ):
        super().__init__(sink)
        if not binaries:
            raise ValueError("PathProbe needs at least one marker binary")
        self.reader = reader
        self.binaries = list(binaries)
        self.search_paths = search_paths
        self.suffix = suffix
        self.max_depth = max_depth

    def _installation_root(self, directory: Path) -> Path:
        for ancestor in list(directory.parents)[: self.max_depth]:
            if self.reader.has_stamp(ancestor):
                return ancestor
        return directory.parent

    def _find(self) -> List[Candidate]:
        directories = self.search_paths()
        primary, others = self.binaries[0], self.binaries[1:]

        for other in others:
            if find_executable(other, directories, suffix=self.suffix) is None:
                self.sink.debug(f"{other} not found on path")
                return []

        candidates: List[Candidate] = []
        seen = set()
        for directory in directories:
            if find_executable(primary, [directory], suffix=self.suffix) is None:
                continue

            root = self._installation_root(directory)
            key = _path_key(root)
            if key in seen:
                continue
            seen.add(key)

            version = self.reader.actual_version(root)
            self.sink.debug(
                f"{primary} found in {directory}; version {version or 'unknown'}"
            )
            candidates.append(make_candidate(root, version, Provenance.PATH))

        return candidates


class RegistryProbe(EvidenceSource):
    """
    Enumerates recorded installations.

    Each backend is read independently, so an unreadable record file does
    not hide what the Windows registry knows.
    """

    name = "registry"

    def __init__(
        self,
        backends: Sequence[RecordBackend],
        sink: Optional[DiagnosticSink] = None,
    ):
        super().__init__(sink)
        self.backends = list(backends)

    def _find(self) -> List[Candidate]:
        candidates: List[Candidate] = []
        seen = set()

        for backend in self.backends:
            try:
                records = backend.records()
            except Exception as e:
                self.sink.debug(f"{backend.name} could not be read: {e}")
                continue

            for record in records:
                key = (_path_key(record.path), record.version)
                if key in seen:
                    continue
                seen.add(key)
                self.sink.debug(f"Found {record.path} for {record.version} in {backend.name}")
                candidates.append(
                    VersionedCandidate(
                        path=record.path,
                        version=record.version,
                        provenance=Provenance.REGISTRY,
                    )
                )

        return candidates


__all__ = [
    "EvidenceSource",
    "BuildConfigProbe",
    "PathProbe",
    "RegistryProbe",
]
