"""
Toolchain compatibility resolution.

The resolver reconciles evidence from three sources under strict precedence
and classifies the outcome as a :data:`Verdict`:

1. CONFIG   - a compatible compiler from the host's build configuration wins.
2. PATH     - a compatible installation on the search path wins; an
              unrecognized one is trusted; a recognized but incompatible one
              is a terminal failure (the registry is not consulted).
3. REGISTRY - no recorded installations means nothing is installed.
4. SELECT   - the right-most compatible record in table order is chosen.
5. VERIFY   - the chosen record must still match what is on disk.

The resolver classifies; it never formats messages and never raises for a
failed resolution (see :mod:`toolchaincheck.toolchain.diagnostics`).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from toolchaincheck.core.exceptions import ConfigError
from toolchaincheck.core.platform import is_target_platform
from toolchaincheck.core.versions import Version
from toolchaincheck.toolchain.candidates import (
    Candidate,
    UnversionedCandidate,
    VersionedCandidate,
)
from toolchaincheck.toolchain.compatibility import CompatibilityTable
from toolchaincheck.toolchain.installed import InstalledVersionReader
from toolchaincheck.toolchain.probes import EvidenceSource
from toolchaincheck.toolchain.sinks import DiagnosticSink, LoggingDiagnosticSink

logger = logging.getLogger(__name__)


class FailureReason(str, Enum):
    """Why a resolution did not produce a compatible toolchain."""

    NOT_APPLICABLE = "not_applicable"
    NOT_INSTALLED = "not_installed"
    HOST_VERSION_UNKNOWN = "host_version_unknown"
    WRONG_VERSION_ON_PATH = "wrong_version_on_path"
    NO_COMPATIBLE_REGISTERED = "no_compatible_registered"
    INSTALLATION_DELETED = "installation_deleted"
    VERSION_DRIFT = "version_drift"


class VerdictCategory(str, Enum):
    """Error taxonomy of a verdict."""

    COMPATIBLE = "compatible"
    NOT_APPLICABLE = "not_applicable"
    NOT_FOUND = "not_found"
    INCOMPATIBLE_VERSION = "incompatible_version"
    DRIFTED = "drifted"


@dataclass(frozen=True)
class Compatible:
    """A compatible toolchain was located."""

    path: Path
    candidate: Candidate
    host_version: Optional[Version] = None
    trusted: bool = True
    """False when an unrecognized toolchain on the path was assumed correct"""

    ok = True

    @property
    def category(self) -> VerdictCategory:
        return VerdictCategory.COMPATIBLE


@dataclass(frozen=True)
class IncompatibleFound:
    """Evidence was found, but none of it is usable."""

    reason: FailureReason
    candidates: Tuple[Candidate, ...]
    host_version: Optional[Version] = None
    recommended: Optional[Version] = None
    actual_version: Optional[Version] = None
    """Version on disk when the recorded installation drifted"""

    ok = False

    @property
    def candidate(self) -> Candidate:
        return self.candidates[0]

    @property
    def category(self) -> VerdictCategory:
        if self.reason in (
            FailureReason.INSTALLATION_DELETED,
            FailureReason.VERSION_DRIFT,
        ):
            return VerdictCategory.DRIFTED
        return VerdictCategory.INCOMPATIBLE_VERSION


@dataclass(frozen=True)
class NotFound:
    """No evidence anywhere, or resolution does not apply on this platform."""

    reason: FailureReason = FailureReason.NOT_INSTALLED
    host_version: Optional[Version] = None
    recommended: Optional[Version] = None
    detail: Optional[str] = None
    """Why the host version could not be determined"""

    ok = False

    @property
    def category(self) -> VerdictCategory:
        if self.reason == FailureReason.NOT_APPLICABLE:
            return VerdictCategory.NOT_APPLICABLE
        return VerdictCategory.NOT_FOUND


Verdict = Union[Compatible, IncompatibleFound, NotFound]


class _State(Enum):
    CONFIG = "config"
    PATH = "path"
    REGISTRY = "registry"
    SELECT = "select"
    VERIFY = "verify"


@dataclass
class _Context:
    host_version: Version
    registry: List[VersionedCandidate] = field(default_factory=list)
    chosen: Optional[VersionedCandidate] = None


HostVersionSource = Union[Version, Callable[[], Version]]


class CompatibilityResolver:
    """
    Decides whether a compatible toolchain is installed.

    Example:
        >>> resolver = CompatibilityResolver(
        ...     table, Version("4.3.1"), config_probe, path_probe, registry_probe, reader
        ... )
        >>> verdict = resolver.resolve()
        >>> verdict.ok
        True
    """

    def __init__(
        self,
        table: CompatibilityTable,
        host_version: HostVersionSource,
        config_probe: EvidenceSource,
        path_probe: EvidenceSource,
        registry_probe: EvidenceSource,
        reader: InstalledVersionReader,
        is_target: Callable[[], bool] = lambda: is_target_platform(["windows"]),
        sink: Optional[DiagnosticSink] = None,
    ):
        """
        Initialize resolver.

        Args:
            table: Compatibility table
            host_version: Host version, or a callable producing it. The
                callable is only invoked on target platforms.
            config_probe: Build configuration evidence source
            path_probe: Search path evidence source
            registry_probe: Installation record evidence source
            reader: Reads installed versions to detect drift
            is_target: Whether resolution applies on this platform
            sink: Diagnostic sink for debug notes
        """
        self.table = table
        self._host_version = host_version if callable(host_version) else (lambda: host_version)
        self.config_probe = config_probe
        self.path_probe = path_probe
        self.registry_probe = registry_probe
        self.reader = reader
        self.is_target = is_target
        self.sink = sink or LoggingDiagnosticSink()

        self._handlers: Dict[_State, Callable[[_Context], Union[_State, Verdict]]] = {
            _State.CONFIG: self._on_config,
            _State.PATH: self._on_path,
            _State.REGISTRY: self._on_registry,
            _State.SELECT: self._on_select,
            _State.VERIFY: self._on_verify,
        }

    def resolve(self) -> Verdict:
        """
        Run one full resolution.

        Returns:
            The verdict for the current host version
        """
        if not self.is_target():
            self.sink.debug("Toolchain resolution does not apply on this platform")
            return NotFound(reason=FailureReason.NOT_APPLICABLE)

        try:
            host_version = self._host_version()
        except ConfigError as e:
            self.sink.debug(f"Host version unavailable: {e}")
            return NotFound(reason=FailureReason.HOST_VERSION_UNKNOWN, detail=str(e))

        context = _Context(host_version=host_version)
        state = _State.CONFIG

        while True:
            logger.debug(f"Resolver state: {state.value}")
            outcome = self._handlers[state](context)
            if isinstance(outcome, _State):
                state = outcome
                continue
            logger.debug(f"Resolved: {outcome.category.value}")
            return outcome

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    def _compatible(self, candidate: Candidate, context: _Context) -> bool:
        return self.table.is_compatible(candidate, context.host_version)

    def _recommended(self, context: _Context) -> Optional[Version]:
        return self.table.most_recent_applicable(context.host_version)

    def _on_config(self, context: _Context) -> Union[_State, Verdict]:
        for candidate in self.config_probe.find():
            if self._compatible(candidate, context):
                self.sink.debug(f"Found compatible compiler from build configuration: {candidate}")
                return Compatible(
                    path=candidate.path,
                    candidate=candidate,
                    host_version=context.host_version,
                )
        return _State.PATH

    def _on_path(self, context: _Context) -> Union[_State, Verdict]:
        candidates = self.path_probe.find()

        for candidate in candidates:
            if self._compatible(candidate, context):
                self.sink.debug(f"Found compatible toolchain on path: {candidate}")
                return Compatible(
                    path=candidate.path,
                    candidate=candidate,
                    host_version=context.host_version,
                )

        for candidate in candidates:
            if isinstance(candidate, UnversionedCandidate):
                self.sink.debug(
                    f"Toolchain binaries on path at {candidate.path}, assuming set up is correct"
                )
                return Compatible(
                    path=candidate.path,
                    candidate=candidate,
                    host_version=context.host_version,
                    trusted=False,
                )

        if candidates:
            return IncompatibleFound(
                reason=FailureReason.WRONG_VERSION_ON_PATH,
                candidates=tuple(candidates),
                host_version=context.host_version,
                recommended=self._recommended(context),
            )

        return _State.REGISTRY

    def _on_registry(self, context: _Context) -> Union[_State, Verdict]:
        context.registry = [
            c for c in self.registry_probe.find() if isinstance(c, VersionedCandidate)
        ]
        if not context.registry:
            return NotFound(
                reason=FailureReason.NOT_INSTALLED,
                host_version=context.host_version,
                recommended=self._recommended(context),
            )
        return _State.SELECT

    def _on_select(self, context: _Context) -> Union[_State, Verdict]:
        def table_order(candidate: VersionedCandidate) -> int:
            position = self.table.order_of(candidate.version)
            return -1 if position is None else position

        ordered = sorted(context.registry, key=table_order)
        compatible = [c for c in ordered if self._compatible(c, context)]

        if not compatible:
            return IncompatibleFound(
                reason=FailureReason.NO_COMPATIBLE_REGISTERED,
                candidates=tuple(context.registry),
                host_version=context.host_version,
                recommended=self._recommended(context),
            )

        context.chosen = compatible[-1]
        self.sink.debug(f"Selected recorded installation {context.chosen}")
        return _State.VERIFY

    def _on_verify(self, context: _Context) -> Verdict:
        chosen = context.chosen
        actual = self.reader.actual_version(chosen.path)

        if actual is None:
            return IncompatibleFound(
                reason=FailureReason.INSTALLATION_DELETED,
                candidates=(chosen,),
                host_version=context.host_version,
                recommended=self._recommended(context),
            )

        if actual != chosen.version:
            return IncompatibleFound(
                reason=FailureReason.VERSION_DRIFT,
                candidates=(chosen,),
                host_version=context.host_version,
                recommended=self._recommended(context),
                actual_version=actual,
            )

        return Compatible(
            path=chosen.path, candidate=chosen, host_version=context.host_version
        )


__all__ = [
    "CompatibilityResolver",
    "Compatible",
    "IncompatibleFound",
    "NotFound",
    "Verdict",
    "FailureReason",
    "VerdictCategory",
]
