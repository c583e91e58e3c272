"""Pydantic models for Rollcall configuration.

These models define the structure of config.toml and secrets.env files.
"""

from pathlib import Path

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    workers: int = 2
    debug: bool = False
    enforce_https: bool = False
    upload_rate_limit_per_minute: int = 20
    # CORS configuration - empty list means same-origin only
    cors_origins: list[str] = []


class DatabaseConfig(BaseModel):
    """MongoDB database configuration."""

    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "rollcall"
    # Connection pool settings
    min_pool_size: int = 10
    max_pool_size: int = 100


class StorageConfig(BaseModel):
    """File storage configuration."""

    data_dir: Path = Field(default_factory=lambda: Path("data"))
    max_upload_mb: int = 10

    @property
    def uploads_dir(self) -> Path:
        """Get the directory holding uploaded source documents."""
        return self.data_dir / "uploads"

    @property
    def max_upload_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_mb * 1024 * 1024


class OCRConfig(BaseModel):
    """OCR (Optical Character Recognition) configuration."""

    tesseract_lang: str = "eng"
    tesseract_cmd: str | None = None


class ImportConfig(BaseModel):
    """Member import pipeline limits."""

    max_rows: int = 5000
    # Extracted PDF/OCR text beyond this many characters is ignored
    max_text_chars: int = 200_000
    header_scan_lines: int = 5


class RollcallConfig(BaseModel):
    """Main Rollcall configuration loaded from config.toml."""

    app_name: str = "Rollcall"
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    imports: ImportConfig = Field(default_factory=ImportConfig)


class SecretsConfig(BaseModel):
    """Secrets loaded from secrets.env file.

    These are sensitive values that should not be stored in config.toml.
    """

    secret_key: str | None = None
