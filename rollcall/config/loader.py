"""Configuration loader for Rollcall.

Loads configuration from TOML files and secrets from .env files.
Environment variables can override any configuration value.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from rollcall.config.schema import RollcallConfig, SecretsConfig

logger = logging.getLogger(__name__)

# Keys whose environment override must be converted before validation
_INT_KEYS = {"port", "workers", "max_upload_mb", "upload_rate_limit_per_minute", "max_rows", "max_text_chars", "header_scan_lines"}
_BOOL_KEYS = {"debug", "enforce_https"}


def get_config_search_paths() -> list[Path]:
    """Get the list of paths to search for configuration files.

    Returns paths in priority order (first found wins):
    1. ./config.toml (project root - for development)
    2. ~/.config/rollcall/config.toml (user config)
    3. /opt/rollcall/config.toml (production install)
    4. /etc/rollcall/config.toml (system config)
    """
    return [
        Path.cwd() / "config.toml",
        Path.home() / ".config" / "rollcall" / "config.toml",
        Path("/opt/rollcall/config.toml"),
        Path("/etc/rollcall/config.toml"),
    ]


def get_secrets_search_paths() -> list[Path]:
    """Get the list of paths to search for secrets files.

    Same priority order as the config search paths.
    """
    return [
        Path.cwd() / "secrets.env",
        Path.home() / ".config" / "rollcall" / "secrets.env",
        Path("/opt/rollcall/secrets.env"),
        Path("/etc/rollcall/secrets.env"),
    ]


def find_config_file() -> Path | None:
    """Find the first existing config file from search paths."""
    for path in get_config_search_paths():
        if path.exists() and path.is_file():
            logger.debug("Found config file: %s", path)
            return path
    return None


def find_secrets_file() -> Path | None:
    """Find the first existing secrets file from search paths."""
    for path in get_secrets_search_paths():
        if path.exists() and path.is_file():
            logger.debug("Found secrets file: %s", path)
            return path
    return None


def load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a simple .env file into a dictionary.

    Supports:
    - KEY=value
    - KEY="quoted value"
    - # comments
    - Empty lines
    """
    env_vars: dict[str, str] = {}

    with open(path) as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            env_vars[key] = value

    return env_vars


def apply_env_overrides(config_dict: dict[str, Any], prefix: str = "ROLLCALL") -> None:
    """Apply environment variable overrides to configuration dictionary.

    Environment variables are mapped as follows:
    - ROLLCALL_SERVER_HOST -> config_dict["server"]["host"]
    - ROLLCALL_MONGODB_URL -> config_dict["database"]["mongodb_url"]
    - etc.

    Note: This modifies config_dict in place.
    """
    env_mappings = {
        # Server
        f"{prefix}_SERVER_HOST": ("server", "host"),
        f"{prefix}_SERVER_PORT": ("server", "port"),
        f"{prefix}_SERVER_WORKERS": ("server", "workers"),
        f"{prefix}_DEBUG": ("server", "debug"),
        f"{prefix}_HOST": ("server", "host"),
        f"{prefix}_PORT": ("server", "port"),
        f"{prefix}_ENFORCE_HTTPS": ("server", "enforce_https"),
        f"{prefix}_UPLOAD_RATE_LIMIT": ("server", "upload_rate_limit_per_minute"),
        # Database
        f"{prefix}_DATABASE_MONGODB_URL": ("database", "mongodb_url"),
        f"{prefix}_DATABASE_MONGODB_DATABASE": ("database", "mongodb_database"),
        f"{prefix}_MONGODB_URL": ("database", "mongodb_url"),
        f"{prefix}_MONGODB_DATABASE": ("database", "mongodb_database"),
        # Storage
        f"{prefix}_STORAGE_DATA_DIR": ("storage", "data_dir"),
        f"{prefix}_STORAGE_MAX_UPLOAD_MB": ("storage", "max_upload_mb"),
        # OCR
        f"{prefix}_OCR_TESSERACT_LANG": ("ocr", "tesseract_lang"),
        f"{prefix}_OCR_TESSERACT_CMD": ("ocr", "tesseract_cmd"),
        # Imports
        f"{prefix}_IMPORT_MAX_ROWS": ("imports", "max_rows"),
        f"{prefix}_IMPORT_MAX_TEXT_CHARS": ("imports", "max_text_chars"),
        f"{prefix}_IMPORT_HEADER_SCAN_LINES": ("imports", "header_scan_lines"),
    }

    for env_var, path in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section, key = path
        if section not in config_dict:
            config_dict[section] = {}

        if key in _INT_KEYS:
            config_dict[section][key] = int(value)
        elif key in _BOOL_KEYS:
            config_dict[section][key] = value.lower() in ("true", "1", "yes")
        else:
            config_dict[section][key] = value


def load_secrets(secrets_file: Path | None = None) -> SecretsConfig:
    """Load secrets from environment variables and optional secrets.env file.

    Environment variables take precedence over file values.
    """
    secrets_dict: dict[str, str | None] = {}
    key_mapping = {
        "ROLLCALL_SECRET_KEY": "secret_key",
    }

    if secrets_file is None:
        secrets_file = find_secrets_file()

    if secrets_file and secrets_file.exists():
        logger.info("Loading secrets from: %s", secrets_file)
        file_secrets = parse_env_file(secrets_file)
        for file_key, config_key in key_mapping.items():
            if file_key in file_secrets:
                secrets_dict[config_key] = file_secrets[file_key]

    for env_var, config_key in key_mapping.items():
        value = os.environ.get(env_var)
        if value:
            secrets_dict[config_key] = value

    return SecretsConfig(**secrets_dict)


def load_config(config_file: Path | None = None) -> RollcallConfig:
    """Load configuration from TOML file with environment variable overrides.

    Args:
        config_file: Optional path to config file. If not provided,
                     searches default locations.

    Returns:
        RollcallConfig instance with all settings loaded.
    """
    config_dict: dict[str, Any] = {}

    if config_file is None:
        config_file = find_config_file()

    if config_file and config_file.exists():
        logger.info("Loading config from: %s", config_file)
        config_dict = load_toml_file(config_file)
    else:
        logger.info("No config file found, using defaults with env overrides")

    apply_env_overrides(config_dict)

    return RollcallConfig(**config_dict)
