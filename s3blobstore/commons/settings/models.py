"""Pydantic settings models for blob store configuration."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "s3blobstore"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class BlobStoreSettings(BaseModel):
    """Blob store settings (S3/MinIO backend)."""

    # Numeric-looking keys arrive as numbers from the environment layer
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = "default"
    bucket: str = "blobstore"
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str | None = None
    expiration_days: int = Field(default=3, ge=0)
    multipart_threshold_bytes: int = Field(default=5 * MIB, ge=1)
    multipart_part_size_bytes: int = Field(default=5 * MIB, ge=5 * MIB)


class TelemetrySettings(BaseModel):
    """Logging settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    blob_store: BlobStoreSettings = Field(default_factory=BlobStoreSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="S3BLOBSTORE__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
