"""Unit tests for settings models and loader."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from s3blobstore.commons.settings.loader import (
    SettingsLoader,
    coerce_env_value,
    get_settings,
    merge_dicts,
    reset_settings,
)
from s3blobstore.commons.settings.models import (
    MIB,
    AppSettings,
    BlobStoreSettings,
    Settings,
    TelemetrySettings,
)


class TestAppSettings:
    """Tests for AppSettings model."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.name == "s3blobstore"
        assert settings.version == "0.1.0"
        assert settings.environment == "dev"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="invalid")  # type: ignore[arg-type]


class TestBlobStoreSettings:
    """Tests for BlobStoreSettings model."""

    def test_default_values(self):
        settings = BlobStoreSettings()
        assert settings.bucket == "blobstore"
        assert settings.endpoint == "localhost:9000"
        assert settings.expiration_days == 3
        assert settings.multipart_threshold_bytes == 5 * MIB
        assert settings.multipart_part_size_bytes == 5 * MIB

    def test_part_size_minimum(self):
        with pytest.raises(ValueError):
            BlobStoreSettings(multipart_part_size_bytes=MIB)

    def test_negative_expiration(self):
        with pytest.raises(ValueError):
            BlobStoreSettings(expiration_days=-1)

    def test_numeric_credentials(self):
        settings = BlobStoreSettings(access_key=12345)  # type: ignore[arg-type]
        assert settings.access_key == "12345"


class TestTelemetrySettings:
    """Tests for TelemetrySettings model."""

    def test_default_values(self):
        settings = TelemetrySettings()
        assert settings.enabled is True
        assert settings.log_format == "json"

    def test_invalid_format(self):
        with pytest.raises(ValueError):
            TelemetrySettings(log_format="xml")  # type: ignore[arg-type]


class TestHelpers:
    """Tests for loader helper functions."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("False", False), ("42", 42), ("1.5", 1.5), ("minio:9000", "minio:9000")],
    )
    def test_coerce_env_value(self, raw, expected):
        assert coerce_env_value(raw) == expected

    def test_merge_dicts(self):
        base = {"blob_store": {"bucket": "a", "endpoint": "x"}, "app": {"debug": False}}
        override = {"blob_store": {"bucket": "b"}}

        merged = merge_dicts(base, override)

        assert merged == {"blob_store": {"bucket": "b", "endpoint": "x"}, "app": {"debug": False}}
        assert base["blob_store"]["bucket"] == "a"


class TestSettingsLoader:
    """Tests for SettingsLoader."""

    def test_load_defaults(self):
        with TemporaryDirectory() as tmpdir:
            settings = SettingsLoader(config_dir=Path(tmpdir), environment="dev", environ={}).load()

        assert isinstance(settings, Settings)
        assert settings.blob_store.bucket == "blobstore"

    def test_layers(self):
        with TemporaryDirectory() as tmpdir:
            config_dir = Path(tmpdir)
            (config_dir / "appsettings.json").write_text(
                json.dumps(
                    {
                        "blob_store": {"bucket": "base-bucket", "endpoint": "minio:9000"},
                        "telemetry": {"log_format": "text"},
                    }
                )
            )
            (config_dir / "appsettings.prod.json").write_text(
                json.dumps({"app": {"environment": "prod"}, "blob_store": {"bucket": "prod-bucket"}})
            )
            environ = {
                "S3BLOBSTORE__BLOB_STORE__EXPIRATION_DAYS": "7",
                "S3BLOBSTORE__BLOB_STORE__USE_SSL": "true",
                "UNRELATED": "ignored",
            }

            settings = SettingsLoader(config_dir=config_dir, environment="prod", environ=environ).load()

        assert settings.app.environment == "prod"
        assert settings.blob_store.bucket == "prod-bucket"
        assert settings.blob_store.endpoint == "minio:9000"
        assert settings.blob_store.expiration_days == 7
        assert settings.blob_store.use_ssl is True
        assert settings.telemetry.log_format == "text"

    def test_environment_from_environ(self):
        loader = SettingsLoader(environ={"S3BLOBSTORE__APP__ENVIRONMENT": "staging"})
        assert loader.environment == "staging"


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_cached(self):
        with TemporaryDirectory() as tmpdir:
            first = get_settings(config_dir=Path(tmpdir), environment="dev")
            second = get_settings()

        assert first is second

    def test_reload(self):
        with TemporaryDirectory() as tmpdir:
            first = get_settings(config_dir=Path(tmpdir), environment="dev")
            second = get_settings(config_dir=Path(tmpdir), environment="dev", reload=True)

        assert first is not second
