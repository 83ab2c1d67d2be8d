"""Layered settings loader: JSON files first, environment variables last."""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from s3blobstore.commons.settings.models import Settings

ENV_PREFIX = "S3BLOBSTORE__"
BASE_CONFIG_FILE = "appsettings.json"


class SettingsLoader:
    """Builds a Settings instance from layered sources.

    Later layers win:
    1. ``appsettings.json`` in the config directory
    2. ``appsettings.{environment}.json``
    3. ``S3BLOBSTORE__`` environment variables, ``__`` separating sections
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            config_dir: Directory holding the JSON files. Defaults to ./config.
            environment: Environment name used to pick the overlay file.
                Defaults to S3BLOBSTORE__APP__ENVIRONMENT or 'dev'.
            environ: Environment mapping, os.environ when omitted.
        """
        self._environ = os.environ if environ is None else environ
        self.config_dir = config_dir or Path("config")
        self.environment = environment or self._environ.get(
            f"{ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Resolve every layer into a validated Settings object."""
        merged: dict[str, Any] = {}
        for layer in (
            self._read_file(BASE_CONFIG_FILE),
            self._read_file(f"appsettings.{self.environment}.json"),
            self._env_overrides(),
        ):
            merged = merge_dicts(merged, layer)
        return Settings(**merged)

    def _read_file(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.is_file():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))

    def _env_overrides(self) -> dict[str, Any]:
        """Turn S3BLOBSTORE__BLOB_STORE__BUCKET=x into {"blob_store": {"bucket": "x"}}."""
        overrides: dict[str, Any] = {}
        for key, raw in self._environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            *sections, leaf = key[len(ENV_PREFIX) :].lower().split("__")
            node = overrides
            for section in sections:
                node = node.setdefault(section, {})
            node[leaf] = coerce_env_value(raw)
        return overrides


def coerce_env_value(raw: str) -> Any:
    """Best-effort conversion of an environment string to bool, int or float."""
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            continue
    return raw


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = merge_dicts(current, value)
        else:
            result[key] = value
    return result


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        _settings = SettingsLoader(config_dir=config_dir, environment=environment).load()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings. Used by tests."""
    global _settings  # noqa: PLW0603
    _settings = None
