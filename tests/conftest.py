"""
Pytest configuration and shared fixtures for ToolchainCheck tests.
"""

import pytest
from pathlib import Path

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.installations import (
    make_installation,
    rtools40,
    rtools35,
)

from toolchaincheck.core.platform import clear_platform_cache
from toolchaincheck.service import set_default_service


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "windows: marks tests that need a real Windows registry",
    )


def pytest_collection_modifyitems(config, items):
    """Skip Windows-only tests elsewhere."""
    import sys

    if sys.platform == "win32":
        return
    skip_windows = pytest.mark.skip(reason="requires Windows")
    for item in items:
        if "windows" in item.keywords:
            item.add_marker(skip_windows)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the real data directory and host overrides."""
    monkeypatch.setenv("TOOLCHAINCHECK_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("TOOLCHAINCHECK_HOST_VERSION", raising=False)
    clear_platform_cache()
    set_default_service(None)
    yield
    set_default_service(None)
    clear_platform_cache()


@pytest.fixture
def records_file(tmp_path) -> Path:
    """Path for a JSON installation record file."""
    return tmp_path / "records" / "installations.json"


@pytest.fixture
def small_table():
    """Two-entry table where both releases support host 1.2."""
    from toolchaincheck.toolchain.compatibility import CompatibilityTable

    return CompatibilityTable.from_list(
        [
            {"version": "1", "host_min": "1.0", "host_max": "1.5"},
            {"version": "2", "host_min": "1.0", "host_max": "2.0"},
        ],
        product="Tool",
    )
