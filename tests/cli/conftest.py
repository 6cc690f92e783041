"""
Shared fixtures for CLI tests.
"""

import logging
import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo the CLI's logging.basicConfig(force=True) after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def cli_config(tmp_path, monkeypatch):
    """
    Write a toolchaincheck.yaml that applies on every OS and never runs R.

    Returns a function writing the file for a host version; the search path
    is emptied so tests add only the directories they need.
    """
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))

    def _write(host_version: str = "4.3.1", platforms=("windows", "linux", "macos")) -> Path:
        config_file = tmp_path / "toolchaincheck.yaml"
        config_file.write_text(
            "version: 1\n"
            f"platforms: [{', '.join(platforms)}]\n"
            "host:\n"
            f"  version: \"{host_version}\"\n"
            "  config_args: []\n"
            "registry:\n"
            "  windows_registry: false\n"
            "  records_file: records/installations.json\n"
        )
        return config_file

    return _write


@pytest.fixture
def on_path(monkeypatch):
    """Put directories on PATH."""

    def _add(*directories):
        monkeypatch.setenv("PATH", os.pathsep.join(str(d) for d in directories))

    return _add
