"""
Centralized exception hierarchy for ToolchainCheck.

Resolution failures are never exceptions: they are verdicts. The classes
below cover configuration mistakes, malformed compatibility tables,
installation record storage problems, and the explicit enforcement boundary.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ToolchainCheckError(Exception):
    """Base exception for all ToolchainCheck errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(ToolchainCheckError):
    """Configuration parsing or validation error."""

    pass


class CompatibilityTableError(ToolchainCheckError):
    """Raised when a compatibility table cannot be loaded or is inconsistent."""

    pass


class InvalidVersionError(ToolchainCheckError):
    """Invalid version format."""

    pass


# ============================================================================
# Installation Record Exceptions
# ============================================================================


class RecordError(ToolchainCheckError):
    """Base exception for installation record storage errors."""

    pass


class RecordLockTimeout(RecordError):
    """Raised when the record file lock cannot be acquired within timeout."""

    pass


class RecordNotFoundError(RecordError):
    """Raised when removing a record that does not exist."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"No installation record for version: {version}")


# ============================================================================
# Enforcement
# ============================================================================


class ToolchainRequiredError(ToolchainCheckError):
    """Raised when a compatible toolchain is required but was not resolved."""

    def __init__(self, product: str, detail: str = ""):
        self.product = product
        self.detail = detail
        msg = f"{product} is not installed."
        if detail:
            msg += f"\n\n{detail}"
        super().__init__(msg)
