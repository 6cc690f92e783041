"""
ToolchainCheck service - the public entry point.

A :class:`ToolchainService` wires a configuration profile into probes, a
resolver and a cache it owns. Module-level helpers use a lazily created
process-wide default service.

Usage:
    from toolchaincheck import has_toolchain, toolchain_path

    if has_toolchain():
        print(toolchain_path())
"""

import logging
import threading
from pathlib import Path
from typing import Callable, List, Optional

from toolchaincheck.config.parser import ToolchainCheckConfig, load_config
from toolchaincheck.core.exceptions import ToolchainRequiredError
from toolchaincheck.core.filesystem import search_path_directories
from toolchaincheck.core.platform import is_target_platform
from toolchaincheck.toolchain.cache import ResolutionCache
from toolchaincheck.toolchain.compatibility import CompatibilityTable
from toolchaincheck.toolchain.diagnostics import DiagnosticRenderer
from toolchaincheck.toolchain.host import HostEnvironment
from toolchaincheck.toolchain.installed import InstalledVersionReader
from toolchaincheck.toolchain.probes import BuildConfigProbe, PathProbe, RegistryProbe
from toolchaincheck.toolchain.records import (
    JsonRecordBackend,
    RecordBackend,
    WindowsRegistryBackend,
)
from toolchaincheck.toolchain.resolver import (
    CompatibilityResolver,
    FailureReason,
    NotFound,
    Verdict,
)
from toolchaincheck.toolchain.sinks import DiagnosticSink, LoggingDiagnosticSink

logger = logging.getLogger(__name__)


def build_table(config: ToolchainCheckConfig) -> CompatibilityTable:
    """Compatibility table for a profile: inline entries, table file, or built-in."""
    if config.compatibility is not None:
        return CompatibilityTable.from_list(config.compatibility, product=config.product)
    table = CompatibilityTable.load(Path(config.table_file) if config.table_file else None)
    table.product = config.product
    return table


def build_record_backends(config: ToolchainCheckConfig) -> List[RecordBackend]:
    """Record backends for a profile, Windows registry first."""
    backends: List[RecordBackend] = []
    if config.registry.windows_registry:
        backends.append(
            WindowsRegistryBackend(key=config.registry.key, hives=config.registry.hives)
        )
    records_file = config.registry.records_file
    backends.append(JsonRecordBackend(Path(records_file) if records_file else None))
    return backends


class ToolchainService:
    """
    Owns the resolution pipeline and its cache for one profile.

    Example:
        >>> service = ToolchainService()
        >>> service.has_toolchain()
        True
        >>> service.toolchain_path()
        [WindowsPath('C:/rtools40/usr/bin'), WindowsPath('C:/rtools40/ucrt64/bin')]
    """

    def __init__(
        self,
        config: Optional[ToolchainCheckConfig] = None,
        sink: Optional[DiagnosticSink] = None,
        host: Optional[HostEnvironment] = None,
        table: Optional[CompatibilityTable] = None,
        backends: Optional[List[RecordBackend]] = None,
        search_paths: Callable[[], List[Path]] = search_path_directories,
        is_target: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize service.

        Args:
            config: Profile (default: built-in Rtools profile)
            sink: Diagnostic sink (default: logging)
            host: Host environment override
            table: Compatibility table override
            backends: Installation record backends override
            search_paths: Search path provider
            is_target: Platform check override
        """
        self.config = config or ToolchainCheckConfig()
        self.sink = sink or LoggingDiagnosticSink()
        self.host = host or HostEnvironment(
            command=self.config.host.command,
            name=self.config.host.name,
            version=self.config.host.version,
            config_args=self.config.host.config_args,
            timeout=self.config.timeout,
        )
        self.table = table or build_table(self.config)
        self.reader = InstalledVersionReader(
            product=self.config.product,
            stamp_file=self.config.markers.stamp,
            version_file=self.config.markers.version_file,
            debug=self.sink.debug,
        )
        self.renderer = DiagnosticRenderer(
            product=self.config.product,
            host_name=self.config.host.name,
            install_url=self.config.install_url,
        )

        self.config_probe = BuildConfigProbe(
            self.host,
            self.reader,
            depth=self.config.host.compiler_depth,
            search_paths=search_paths,
            sink=self.sink,
        )
        self.path_probe = PathProbe(
            self.reader,
            binaries=self.config.markers.binaries,
            search_paths=search_paths,
            sink=self.sink,
        )
        self.registry_probe = RegistryProbe(
            backends if backends is not None else build_record_backends(self.config),
            sink=self.sink,
        )

        platforms = self.config.platforms
        self.resolver = CompatibilityResolver(
            self.table,
            self.host.host_version,
            self.config_probe,
            self.path_probe,
            self.registry_probe,
            self.reader,
            is_target=is_target or (lambda: is_target_platform(platforms)),
            sink=self.sink,
        )
        self.cache = ResolutionCache(self.resolver)

    def resolve(self, force_refresh: bool = False) -> Verdict:
        """Verdict for the current host, cached unless ``force_refresh``."""
        return self.cache.resolve(force_refresh)

    def has_toolchain(self, debug: bool = False) -> bool:
        """
        Is a compatible toolchain installed?

        Args:
            debug: Re-probe instead of using the cached result, and send
                each probe's notes to the sink's debug channel

        Returns:
            True if compatible. On failure a diagnostic is emitted to the
            sink's warning channel (except on non-target platforms).
        """
        if debug:
            with self.sink.debugging():
                verdict = self.resolve(force_refresh=True)
        else:
            verdict = self.resolve()

        if verdict.ok:
            return True

        message = self.renderer.render(verdict)
        if message:
            self.sink.warning(message)
        return False

    def toolchain_path(self) -> List[Path]:
        """
        Executable directories of the resolved installation.

        Returns:
            Bin directories from the compatibility table for the resolved
            version, the resolved path itself for an unversioned toolchain,
            or an empty list when nothing compatible was resolved.
        """
        verdict = self.resolve()
        if not verdict.ok:
            return []

        entry = self.table.range_for(verdict.candidate.version)
        if entry is None or not entry.bin_paths:
            return [verdict.path]
        return [verdict.path / sub for sub in entry.bin_paths]

    def require_compatible_toolchain(self, debug: bool = False) -> bool:
        """
        Fail unless a compatible toolchain is installed.

        Non-target platforms pass silently.

        Raises:
            ToolchainRequiredError: If no compatible toolchain was resolved
        """
        if self.has_toolchain(debug=debug):
            return True

        verdict = self.cache.verdict
        if isinstance(verdict, NotFound) and verdict.reason == FailureReason.NOT_APPLICABLE:
            return True

        raise ToolchainRequiredError(self.config.product, self.renderer.render(verdict) or "")


_default_service: Optional[ToolchainService] = None
_default_lock = threading.Lock()


def get_default_service() -> ToolchainService:
    """Process-wide service built from ./toolchaincheck.yaml or the built-in profile."""
    global _default_service
    with _default_lock:
        if _default_service is None:
            _default_service = ToolchainService(load_config())
        return _default_service


def set_default_service(service: Optional[ToolchainService]):
    """Replace (or with None, reset) the process-wide service."""
    global _default_service
    with _default_lock:
        _default_service = service


def has_toolchain(debug: bool = False) -> bool:
    """Is a compatible toolchain installed? Result is cached per process."""
    return get_default_service().has_toolchain(debug=debug)


find_toolchain = has_toolchain
setup_toolchain = has_toolchain


def toolchain_path() -> List[Path]:
    """Executable directories of the resolved toolchain, [] if none."""
    return get_default_service().toolchain_path()


def require_compatible_toolchain(debug: bool = False) -> bool:
    """Raise ToolchainRequiredError unless a compatible toolchain is installed."""
    return get_default_service().require_compatible_toolchain(debug=debug)


__all__ = [
    "ToolchainService",
    "build_table",
    "build_record_backends",
    "get_default_service",
    "set_default_service",
    "has_toolchain",
    "find_toolchain",
    "setup_toolchain",
    "toolchain_path",
    "require_compatible_toolchain",
]
