"""Configuration module for ToolchainCheck.

This module provides YAML configuration parsing and validation for
toolchaincheck.yaml.
"""

from toolchaincheck.config.parser import (
    HostConfig,
    MarkerConfig,
    RegistryConfig,
    ToolchainCheckConfig,
    ConfigError,
    parse_config,
    parse_config_data,
    load_config,
    DEFAULT_CONFIG_NAME,
)

__all__ = [
    "HostConfig",
    "MarkerConfig",
    "RegistryConfig",
    "ToolchainCheckConfig",
    "ConfigError",
    "parse_config",
    "parse_config_data",
    "load_config",
    "DEFAULT_CONFIG_NAME",
]
