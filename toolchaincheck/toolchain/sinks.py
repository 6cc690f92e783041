"""
Diagnostic sinks.

Resolution reports two kinds of output: user-visible warnings (a toolchain
is missing or wrong) and debug notes (what each probe saw), the latter only
when debugging is switched on.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional


class DiagnosticSink:
    """Receives diagnostics produced during resolution."""

    def warning(self, message: str):
        pass

    def debug(self, message: str):
        pass

    @contextmanager
    def debugging(self) -> Iterator["DiagnosticSink"]:
        """Keep debug notes for the duration of the block."""
        yield self


class LoggingDiagnosticSink(DiagnosticSink):
    """
    Sink that forwards diagnostics to a logger.

    Debug notes are dropped unless ``enabled_debug`` is set or a
    :meth:`debugging` block is active, so a failing probe stays silent in
    normal runs.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, enabled_debug: bool = False):
        self.logger = logger or logging.getLogger("toolchaincheck")
        self.enabled_debug = enabled_debug

    def warning(self, message: str):
        self.logger.warning(message)

    def debug(self, message: str):
        if self.enabled_debug:
            self.logger.debug(message)

    @contextmanager
    def debugging(self) -> Iterator["LoggingDiagnosticSink"]:
        previous = self.enabled_debug
        self.enabled_debug = True
        try:
            yield self
        finally:
            self.enabled_debug = previous


class RecordingDiagnosticSink(DiagnosticSink):
    """Sink that keeps every message, for doctor output and tests."""

    def __init__(self):
        self.warnings: List[str] = []
        self.debugs: List[str] = []

    def warning(self, message: str):
        self.warnings.append(message)

    def debug(self, message: str):
        self.debugs.append(message)


__all__ = ["DiagnosticSink", "LoggingDiagnosticSink", "RecordingDiagnosticSink"]
