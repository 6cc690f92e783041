"""
Check command - is a compatible toolchain installed?

Exit status is the answer: 0 when a compatible toolchain was resolved (or
the platform does not use one), 1 otherwise. The diagnostic explaining a
failure goes to the warning log.
"""

import logging

from toolchaincheck.cli.utils import build_service, safe_print
from toolchaincheck.core.exceptions import ToolchainRequiredError
from toolchaincheck.toolchain.resolver import VerdictCategory
from toolchaincheck.toolchain.sinks import LoggingDiagnosticSink

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run check command.

    Args:
        args: Parsed arguments from argparse

    Returns:
        Exit code (0 for success, 1 when no compatible toolchain is installed)
    """
    debug = getattr(args, "debug", False)
    quiet = getattr(args, "quiet", False)

    sink = LoggingDiagnosticSink(enabled_debug=debug)
    service = build_service(args, sink=sink)

    try:
        service.require_compatible_toolchain(debug=debug)
    except ToolchainRequiredError as e:
        logger.debug(f"Check failed: {e.product} not resolved")
        return 1

    verdict = service.resolve()
    if verdict.category == VerdictCategory.NOT_APPLICABLE:
        if not quiet:
            safe_print(f"{service.config.product} is not used on this platform")
        return 0

    if not quiet:
        version = verdict.candidate.version or "unknown version"
        safe_print(f"✅ {service.config.product} {version} found at {verdict.path}")
        if not verdict.trusted:
            safe_print(
                f"⚠️  {service.config.product} version could not be verified; "
                f"assuming the toolchain on PATH is correct"
            )

    if getattr(args, "path", False):
        for directory in service.toolchain_path():
            print(directory)

    return 0
