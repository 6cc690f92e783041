"""YAML configuration parser for ToolchainCheck.

A profile describes the toolchain product, its host system, where its
installations are recorded and which releases support which host versions.
Without a configuration file the built-in Rtools/R profile is used.

Example ``toolchaincheck.yaml``::

    version: 1
    product: Rtools
    install_url: https://cran.r-project.org/bin/windows/Rtools/
    platforms: [windows]
    host:
      name: R
      command: R
      version: "4.3.1"
    markers:
      binaries: [ls, gcc]
      stamp: Rtools.txt
      version_file: VERSION.txt
    registry:
      key: SOFTWARE\\R-core\\Rtools
      records_file: ~/.toolchaincheck/installations.json
    compatibility:
      - {version: "4.0", host_min: "4.0.0", host_max: "99.99.99", bin_paths: [usr/bin]}
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from toolchaincheck.core.exceptions import ConfigError
from toolchaincheck.toolchain.diagnostics import DEFAULT_INSTALL_URL
from toolchaincheck.toolchain.records import DEFAULT_HIVES, DEFAULT_REGISTRY_KEY

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "toolchaincheck.yaml"

VALID_HIVES = ["HKEY_CURRENT_USER", "HKEY_LOCAL_MACHINE"]


@dataclass
class HostConfig:
    """The system consuming the toolchain."""

    name: str = "R"
    command: str = "R"
    version: Optional[str] = None  # detected from '<command> --version' when unset
    config_args: List[str] = field(default_factory=lambda: ["CMD", "config", "CC"])
    compiler_depth: int = 3  # <root>/<subdir>/bin/<compiler>


@dataclass
class MarkerConfig:
    """Files identifying a toolchain installation."""

    binaries: List[str] = field(default_factory=lambda: ["ls", "gcc"])
    stamp: str = "Rtools.txt"
    version_file: str = "VERSION.txt"


@dataclass
class RegistryConfig:
    """Where installations are recorded."""

    key: str = DEFAULT_REGISTRY_KEY
    hives: List[str] = field(default_factory=lambda: list(DEFAULT_HIVES))
    windows_registry: bool = True
    records_file: Optional[str] = None  # default: ~/.toolchaincheck/installations.json


@dataclass
class ToolchainCheckConfig:
    """Complete ToolchainCheck configuration."""

    version: int = 1
    product: str = "Rtools"
    install_url: str = DEFAULT_INSTALL_URL
    platforms: List[str] = field(default_factory=lambda: ["windows"])
    host: HostConfig = field(default_factory=HostConfig)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    compatibility: Optional[List[Dict[str, Any]]] = None
    table_file: Optional[str] = None
    timeout: float = 10


def parse_config(config_path: Path) -> ToolchainCheckConfig:
    """
    Parse toolchaincheck.yaml configuration file.

    Args:
        config_path: Path to toolchaincheck.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    config = parse_config_data(data)

    # Relative table/record paths are relative to the config file
    base = config_path.parent
    if config.table_file and not Path(config.table_file).expanduser().is_absolute():
        config.table_file = str(base / config.table_file)
    if (
        config.registry.records_file
        and not Path(config.registry.records_file).expanduser().is_absolute()
    ):
        config.registry.records_file = str(base / config.registry.records_file)

    return config


def load_config(config_path: Optional[Path] = None) -> ToolchainCheckConfig:
    """
    Load configuration, falling back to the built-in profile.

    Args:
        config_path: Explicit config file (must exist). If None, uses
            ./toolchaincheck.yaml when present.

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid
    """
    if config_path is not None:
        return parse_config(Path(config_path))

    default_path = Path.cwd() / DEFAULT_CONFIG_NAME
    if default_path.exists():
        logger.debug(f"Loading configuration from {default_path}")
        return parse_config(default_path)

    logger.debug("No configuration file, using built-in profile")
    return ToolchainCheckConfig()


def parse_config_data(data: Any) -> ToolchainCheckConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    platforms = data.get("platforms", ["windows"])
    if isinstance(platforms, str):
        platforms = [platforms]
    if not isinstance(platforms, list) or not all(isinstance(p, str) for p in platforms):
        raise ConfigError("platforms must be a list of OS names")

    compatibility = data.get("compatibility")
    if compatibility is not None and not isinstance(compatibility, list):
        raise ConfigError("compatibility must be a list of entries")

    timeout = data.get("timeout", 10)
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"timeout must be a positive number, got {timeout!r}")

    return ToolchainCheckConfig(
        version=version,
        product=_require_str(data, "product", "Rtools"),
        install_url=_require_str(data, "install_url", DEFAULT_INSTALL_URL),
        platforms=[p.lower() for p in platforms],
        host=_parse_host(data.get("host") or {}),
        markers=_parse_markers(data.get("markers") or {}),
        registry=_parse_registry(data.get("registry") or {}),
        compatibility=compatibility,
        table_file=data.get("table_file"),
        timeout=timeout,
    )


def _require_str(data: dict, key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{key} must be a non-empty string")
    return value


def _parse_host(data: dict) -> HostConfig:
    """Parse host configuration."""
    if not isinstance(data, dict):
        raise ConfigError("host must be a mapping")

    version = data.get("version")
    if version is not None:
        # YAML reads 4.0 as a float; keep the text the user meant
        version = str(version)

    config_args = data.get("config_args", ["CMD", "config", "CC"])
    if not isinstance(config_args, list):
        raise ConfigError("host.config_args must be a list")

    depth = data.get("compiler_depth", 3)
    if not isinstance(depth, int) or depth < 1:
        raise ConfigError(f"host.compiler_depth must be a positive integer, got {depth!r}")

    return HostConfig(
        name=_require_str(data, "name", "R"),
        command=_require_str(data, "command", "R"),
        version=version,
        config_args=[str(a) for a in config_args],
        compiler_depth=depth,
    )


def _parse_markers(data: dict) -> MarkerConfig:
    """Parse marker file configuration."""
    if not isinstance(data, dict):
        raise ConfigError("markers must be a mapping")

    binaries = data.get("binaries", ["ls", "gcc"])
    if not isinstance(binaries, list) or not binaries:
        raise ConfigError("markers.binaries must be a non-empty list")

    return MarkerConfig(
        binaries=[str(b) for b in binaries],
        stamp=_require_str(data, "stamp", "Rtools.txt"),
        version_file=_require_str(data, "version_file", "VERSION.txt"),
    )


def _parse_registry(data: dict) -> RegistryConfig:
    """Parse installation record configuration."""
    if not isinstance(data, dict):
        raise ConfigError("registry must be a mapping")

    hives = data.get("hives", list(DEFAULT_HIVES))
    if not isinstance(hives, list):
        raise ConfigError("registry.hives must be a list")
    for hive in hives:
        if hive not in VALID_HIVES:
            raise ConfigError(f"Invalid registry hive: {hive} (expected one of {VALID_HIVES})")

    records_file = data.get("records_file")
    if records_file is not None:
        records_file = str(Path(str(records_file)).expanduser())

    return RegistryConfig(
        key=_require_str(data, "key", DEFAULT_REGISTRY_KEY),
        hives=hives,
        windows_registry=bool(data.get("windows_registry", True)),
        records_file=records_file,
    )
