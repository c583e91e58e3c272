"""Rollcall configuration module.

This module provides TOML-based configuration with environment variable overrides.

Configuration is loaded from the following locations (in order of priority):
1. Environment variables (highest priority)
2. ./config.toml (project root - for development)
3. ~/.config/rollcall/config.toml (user config)
4. /opt/rollcall/config.toml
5. /etc/rollcall/config.toml (system config)

Secrets are loaded from secrets.env files in the same directories.
"""

from rollcall.config.schema import (
    DatabaseConfig,
    ImportConfig,
    OCRConfig,
    RollcallConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from rollcall.config.settings import get_settings, settings

__all__ = [
    "DatabaseConfig",
    "ImportConfig",
    "OCRConfig",
    "RollcallConfig",
    "SecretsConfig",
    "ServerConfig",
    "StorageConfig",
    "get_settings",
    "settings",
]
