"""Test fixtures for ToolchainCheck tests.

- installations: Fake toolchain installation directories and static probes

Import fixtures in your tests using:
    from tests.fixtures.installations import create_installation, StaticProbe
"""

__all__ = [
    "installations",
]
