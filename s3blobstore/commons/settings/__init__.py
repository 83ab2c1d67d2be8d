"""Settings management module."""

from s3blobstore.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from s3blobstore.commons.settings.models import (
    AppSettings,
    BlobStoreSettings,
    Settings,
    TelemetrySettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Models
    "Settings",
    "AppSettings",
    "BlobStoreSettings",
    "TelemetrySettings",
]
