"""
Doctor command for diagnosing toolchain detection.

Runs each evidence source on its own and reports what it saw, then the
resolver's verdict, so a user can tell why a toolchain was (or was not)
accepted.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from toolchaincheck.cli.utils import build_service, safe_print
from toolchaincheck.core.exceptions import ToolchainCheckError
from toolchaincheck.core.platform import detect_platform
from toolchaincheck.service import ToolchainService
from toolchaincheck.toolchain.probes import EvidenceSource
from toolchaincheck.toolchain.resolver import VerdictCategory
from toolchaincheck.toolchain.sinks import RecordingDiagnosticSink

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of a diagnostic check."""

    name: str
    passed: bool
    message: str
    details: List[str] = field(default_factory=list)
    fix_hint: Optional[str] = None
    optional: bool = False
    """Failures of optional checks are reported as warnings"""


class ToolchainDoctor:
    """Runs diagnostic checks against one service."""

    def __init__(self, service: ToolchainService):
        self.service = service
        self.product = service.config.product
        self.host_name = service.config.host.name

    def check_platform(self) -> CheckResult:
        info = detect_platform()
        targets = ", ".join(self.service.config.platforms)
        if self.service.resolver.is_target():
            return CheckResult("Platform", True, f"{info} (uses {self.product})")
        return CheckResult(
            "Platform",
            True,
            f"{info} is not one of [{targets}]; {self.product} is not needed here",
        )

    def check_host(self) -> CheckResult:
        try:
            version = self.service.host.host_version()
        except ToolchainCheckError as e:
            return CheckResult(
                f"{self.host_name} version",
                False,
                str(e),
                fix_hint="Set host.version in toolchaincheck.yaml",
                optional=not self.service.resolver.is_target(),
            )

        recommended = self.service.table.recommendation(version)
        return CheckResult(
            f"{self.host_name} version",
            True,
            f"{self.host_name} {version} (needs {recommended})",
        )

    def check_probe(self, title: str, probe: EvidenceSource) -> CheckResult:
        candidates = probe.find()
        if not candidates:
            return CheckResult(title, False, "nothing found", optional=True)

        return CheckResult(
            title,
            True,
            f"{len(candidates)} candidate(s)",
            details=[str(c) for c in candidates],
        )

    def check_verdict(self) -> CheckResult:
        try:
            verdict = self.service.resolve(force_refresh=True)
        except ToolchainCheckError as e:
            return CheckResult("Verdict", False, str(e))

        if verdict.category == VerdictCategory.NOT_APPLICABLE:
            return CheckResult("Verdict", True, "not applicable on this platform")

        if verdict.ok:
            version = verdict.candidate.version or "unknown version"
            message = f"{self.product} {version} at {verdict.path}"
            if not verdict.trusted:
                message += " (version not verified)"
            return CheckResult(
                "Verdict",
                True,
                message,
                details=[str(p) for p in self.service.toolchain_path()],
            )

        return CheckResult(
            "Verdict",
            False,
            verdict.category.value.replace("_", " "),
            fix_hint=self.service.renderer.render(verdict),
        )

    def run_all_checks(self) -> List[CheckResult]:
        results = [self.check_platform(), self.check_host()]
        results.append(self.check_probe("Build configuration", self.service.config_probe))
        results.append(self.check_probe("Search path", self.service.path_probe))
        results.append(self.check_probe("Installation records", self.service.registry_probe))
        results.append(self.check_verdict())
        return results


def run(args) -> int:
    """
    Run doctor command.

    Args:
        args: Parsed arguments from argparse

    Returns:
        Exit code (0 when the verdict is compatible or not applicable)
    """
    quiet = getattr(args, "quiet", False)
    verbose = getattr(args, "verbose", False)

    sink = RecordingDiagnosticSink()
    service = build_service(args, sink=sink)

    if not quiet:
        safe_print(f"🔍 Diagnosing {service.config.product} detection...\n")
        logger.info("Starting toolchain diagnostics")

    results = ToolchainDoctor(service).run_all_checks()

    passed = 0
    failed = 0
    warnings = 0

    for result in results:
        if result.passed:
            passed += 1
            if not quiet:
                safe_print(f"✅ {result.name}: {result.message}")
        elif result.optional:
            warnings += 1
            if not quiet:
                safe_print(f"⚠️  {result.name}: {result.message}")
        else:
            failed += 1
            safe_print(f"❌ {result.name}: {result.message}")

        if not quiet:
            for detail in result.details:
                safe_print(f"   - {detail}")
        if not result.passed and result.fix_hint:
            safe_print(f"   💡 {result.fix_hint}")

    if verbose and sink.debugs:
        safe_print("\nProbe notes:")
        for note in sink.debugs:
            safe_print(f"   {note}")

    if not quiet:
        safe_print(f"\n📊 Summary: {passed} passed, {failed} failed, {warnings} warnings")

    return 0 if failed == 0 else 1
