"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
import sys
from typing import Optional

from toolchaincheck.config.parser import ToolchainCheckConfig, load_config
from toolchaincheck.service import ToolchainService
from toolchaincheck.toolchain.sinks import DiagnosticSink

logger = logging.getLogger(__name__)


# ============================================================================
# Service Construction
# ============================================================================


def load_cli_config(args) -> ToolchainCheckConfig:
    """
    Load the profile named by ``--config``, or the default one.

    Raises:
        ConfigError: If the configuration file is missing or invalid
    """
    return load_config(getattr(args, "config", None))


def build_service(args, sink: Optional[DiagnosticSink] = None) -> ToolchainService:
    """
    Create a ToolchainService for a CLI invocation.

    Args:
        args: Parsed arguments (uses ``config``)
        sink: Diagnostic sink (default: logging)
    """
    config = load_cli_config(args)
    logger.debug(f"Using profile for {config.product} / {config.host.name}")
    return ToolchainService(config, sink=sink)


# ============================================================================
# Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for Windows console.

    Falls back to ASCII-safe characters if Unicode emojis can't be encoded.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        safe_message = (
            message.replace("⚠️", "WARNING:")
            .replace("✓", "[OK]")
            .replace("✅", "[OK]")
            .replace("❌", "[ERROR]")
            .replace("🔍", "[PROBE]")
            .replace("📊", "[SUMMARY]")
            .replace("💡", "[HINT]")
        )
        print(safe_message, file=file)
