"""Blob store configuration value object."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, SecretStr

if TYPE_CHECKING:
    from s3blobstore.commons.settings.models import BlobStoreSettings

# Days a soft-deleted object survives before the bucket lifecycle expires it
DEFAULT_EXPIRATION_IN_DAYS = 3


class BlobStoreConfiguration(BaseModel):
    """Everything one blob store needs to reach its bucket.

    Frozen: a store keeps the configuration it was initialized with.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Blob store name")
    bucket: str = Field(description="Bucket holding this store's objects")
    endpoint: str = Field(default="localhost:9000", description="S3/MinIO endpoint")
    region: str | None = Field(default=None, description="AWS region")
    expiration_days: int = Field(
        default=DEFAULT_EXPIRATION_IN_DAYS,
        ge=0,
        description="Days until soft-deleted objects expire; 0 disables expiry",
    )
    access_key: str = ""
    secret_key: SecretStr = SecretStr("")
    use_ssl: bool = False

    @classmethod
    def from_settings(cls, settings: BlobStoreSettings) -> BlobStoreConfiguration:
        """Build a configuration from the ``blob_store`` settings section."""
        return cls(
            name=settings.name,
            bucket=settings.bucket,
            endpoint=settings.endpoint,
            region=settings.region,
            expiration_days=settings.expiration_days,
            access_key=settings.access_key,
            secret_key=SecretStr(settings.secret_key),
            use_ssl=settings.use_ssl,
        )
