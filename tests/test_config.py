"""Tests for the Rollcall configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

from rollcall.config.loader import (
    apply_env_overrides,
    find_config_file,
    find_secrets_file,
    get_config_search_paths,
    load_config,
    load_secrets,
    parse_env_file,
)
from rollcall.config.schema import (
    DatabaseConfig,
    ImportConfig,
    RollcallConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from rollcall.config.settings import Settings, get_settings, reset_settings


class TestSchemaDefaults:
    """Test default values in schema models."""

    def test_storage_config_defaults(self):
        config = StorageConfig()
        assert config.data_dir == Path("data")
        assert config.uploads_dir == Path("data/uploads")
        assert config.max_upload_mb == 10
        assert config.max_upload_bytes == 10 * 1024 * 1024

    def test_import_config_defaults(self):
        config = ImportConfig()
        assert config.max_rows == 5000
        assert config.max_text_chars == 200_000
        assert config.header_scan_lines == 5

    def test_rollcall_config_defaults(self):
        config = RollcallConfig()
        assert config.app_name == "Rollcall"
        assert config.database.mongodb_database == "rollcall"
        assert config.server.upload_rate_limit_per_minute == 20


class TestConfigSearchPaths:
    def test_config_search_paths_order(self):
        """Test config search paths are in correct priority order."""
        paths = get_config_search_paths()
        assert paths[0] == Path.cwd() / "config.toml"
        assert paths[1] == Path.home() / ".config" / "rollcall" / "config.toml"
        assert paths[-1] == Path("/etc/rollcall/config.toml")

    def test_find_config_file_in_cwd(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.toml"
        config_file.write_text("[server]\nport = 8000\n")

        monkeypatch.chdir(tmp_path)
        assert find_config_file() == config_file

    def test_find_secrets_file_in_cwd(self, tmp_path, monkeypatch):
        secrets_file = tmp_path / "secrets.env"
        secrets_file.write_text("ROLLCALL_SECRET_KEY=test\n")

        monkeypatch.chdir(tmp_path)
        assert find_secrets_file() == secrets_file


class TestLoading:
    def test_load_config_from_file(self, tmp_path):
        """Test load_config with a specific file; unset values keep defaults."""
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            """
app_name = "Parish Roll"

[server]
port = 5000

[imports]
max_rows = 200
"""
        )

        config = load_config(config_file)
        assert config.app_name == "Parish Roll"
        assert config.server.port == 5000
        assert config.imports.max_rows == 200
        assert config.imports.header_scan_lines == 5
        assert config.server.host == "127.0.0.1"

    def test_parse_env_file_handles_quotes_and_comments(self, tmp_path):
        env_file = tmp_path / "secrets.env"
        env_file.write_text('# comment\n\nKEY1="double quoted"\nKEY2=\'single\'\nKEY3=plain\n')

        result = parse_env_file(env_file)
        assert result == {"KEY1": "double quoted", "KEY2": "single", "KEY3": "plain"}

    def test_load_secrets_env_override(self, tmp_path):
        secrets_file = tmp_path / "secrets.env"
        secrets_file.write_text("ROLLCALL_SECRET_KEY=file-secret-key\n")

        with patch.dict(os.environ, {"ROLLCALL_SECRET_KEY": "env-secret-key"}):
            secrets = load_secrets(secrets_file)

        assert secrets.secret_key == "env-secret-key"


class TestEnvOverrides:
    def test_apply_server_and_storage_overrides(self):
        config_dict = {}

        with patch.dict(
            os.environ,
            {
                "ROLLCALL_PORT": "3000",
                "ROLLCALL_STORAGE_DATA_DIR": "/srv/rollcall",
                "ROLLCALL_STORAGE_MAX_UPLOAD_MB": "25",
            },
        ):
            apply_env_overrides(config_dict)

        assert config_dict["server"]["port"] == 3000
        assert config_dict["storage"]["data_dir"] == "/srv/rollcall"
        assert config_dict["storage"]["max_upload_mb"] == 25

    def test_apply_import_overrides(self):
        config_dict = {}

        with patch.dict(
            os.environ,
            {"ROLLCALL_IMPORT_MAX_ROWS": "100", "ROLLCALL_IMPORT_HEADER_SCAN_LINES": "8"},
        ):
            apply_env_overrides(config_dict)

        assert config_dict["imports"] == {"max_rows": 100, "header_scan_lines": 8}

    def test_apply_boolean_override(self):
        config_dict = {"server": {"debug": True}}

        with patch.dict(os.environ, {"ROLLCALL_DEBUG": "false"}):
            apply_env_overrides(config_dict)

        assert config_dict["server"]["debug"] is False


class TestSettings:
    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_settings_generates_secret_key(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ROLLCALL_SECRET_KEY", raising=False)
        monkeypatch.chdir(tmp_path)

        settings = Settings(secrets=SecretsConfig())
        assert len(settings.secret_key) > 20

    def test_settings_property_accessors(self, tmp_path):
        config = RollcallConfig(
            server=ServerConfig(upload_rate_limit_per_minute=7),
            database=DatabaseConfig(mongodb_database="testdb"),
            storage=StorageConfig(data_dir=tmp_path, max_upload_mb=2),
            imports=ImportConfig(max_rows=10),
        )
        settings = Settings(config=config, secrets=SecretsConfig(secret_key="test-key"))

        assert settings.mongodb_database == "testdb"
        assert settings.upload_rate_limit == "7/minute"
        assert settings.upload_dir == tmp_path / "uploads"
        assert settings.max_upload_size_bytes == 2 * 1024 * 1024
        assert settings.import_max_rows == 10
        assert settings.secret_key == "test-key"

    def test_get_settings_singleton(self):
        assert get_settings() is get_settings()
        first = get_settings()
        reset_settings()
        assert get_settings() is not first
