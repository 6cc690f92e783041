"""
Toolchain resolution module for ToolchainCheck.

This module provides functionality for:
- Compatibility table lookup
- Evidence sources (build configuration, search path, installation records)
- Installed version verification
- Resolution with caching and diagnostics
"""

from toolchaincheck.toolchain.candidates import (
    Candidate,
    Provenance,
    UnversionedCandidate,
    VersionedCandidate,
    make_candidate,
)
from toolchaincheck.toolchain.compatibility import (
    CompatibilityEntry,
    CompatibilityTable,
)
from toolchaincheck.toolchain.installed import InstalledVersionReader
from toolchaincheck.toolchain.host import HostEnvironment
from toolchaincheck.toolchain.records import (
    InstallRecord,
    RecordBackend,
    WindowsRegistryBackend,
    JsonRecordBackend,
)
from toolchaincheck.toolchain.probes import (
    EvidenceSource,
    BuildConfigProbe,
    PathProbe,
    RegistryProbe,
)
from toolchaincheck.toolchain.resolver import (
    CompatibilityResolver,
    Compatible,
    IncompatibleFound,
    NotFound,
    Verdict,
    FailureReason,
    VerdictCategory,
)
from toolchaincheck.toolchain.cache import ResolutionCache
from toolchaincheck.toolchain.diagnostics import DiagnosticRenderer
from toolchaincheck.toolchain.sinks import (
    DiagnosticSink,
    LoggingDiagnosticSink,
    RecordingDiagnosticSink,
)

__all__ = [
    # Candidates
    "Candidate",
    "Provenance",
    "UnversionedCandidate",
    "VersionedCandidate",
    "make_candidate",
    # Compatibility
    "CompatibilityEntry",
    "CompatibilityTable",
    # Evidence
    "InstalledVersionReader",
    "HostEnvironment",
    "InstallRecord",
    "RecordBackend",
    "WindowsRegistryBackend",
    "JsonRecordBackend",
    "EvidenceSource",
    "BuildConfigProbe",
    "PathProbe",
    "RegistryProbe",
    # Resolution
    "CompatibilityResolver",
    "Compatible",
    "IncompatibleFound",
    "NotFound",
    "Verdict",
    "FailureReason",
    "VerdictCategory",
    "ResolutionCache",
    # Diagnostics
    "DiagnosticRenderer",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "RecordingDiagnosticSink",
]
