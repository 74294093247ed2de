"""
Configuration loader: builds InstallerSettings from all sources.

Sources, later wins:
    defaults  <  installer.yml (optional)  <  REMEMBRANCES_* env vars  <  CLI flags

The YAML file is validated against the Pydantic model exactly like the
environment values, so a typo in either surfaces as a ``ConfigError``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from remembrances_installer.core.models.settings import InstallerSettings

logger = logging.getLogger(__name__)

# Default config filename, looked up in the current directory only
INSTALLER_CONFIG_FILE = "installer.yml"

# env var → settings field
ENV_VARS: dict[str, str] = {
    "REMEMBRANCES_REPO": "repo",
    "REMEMBRANCES_VERSION": "version",
    "REMEMBRANCES_NVIDIA": "nvidia",
    "REMEMBRANCES_PORTABLE": "portable",
    "REMEMBRANCES_DOWNLOAD_MODEL": "download_model",
    "REMEMBRANCES_SKIP_CUDA_LIBS": "skip_cuda_libs",
    "REMEMBRANCES_CUDA_LIBS_URL": "cuda_libs_url",
    "REMEMBRANCES_HTTP_TIMEOUT": "http_timeout",
}


class ConfigError(Exception):
    """Raised when installer configuration is invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return ``installer.yml`` in ``start_dir`` (default: cwd) if present."""
    candidate = (start_dir or Path.cwd()) / INSTALLER_CONFIG_FILE
    return candidate if candidate.is_file() else None


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading installer config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under an "installer" key or be flat
    if isinstance(data.get("installer"), dict):
        data = data["installer"]

    # YAML keys may use dashes like the application's own config
    return {str(k).replace("-", "_"): v for k, v in data.items()}


def _read_env(env: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for var, field in ENV_VARS.items():
        raw = env.get(var)
        if raw is None or raw == "":
            continue
        if field == "skip_cuda_libs":
            # Only an explicit "yes" skips the bundle download
            values[field] = raw.strip().lower() in ("yes", "y", "true", "1")
        else:
            values[field] = raw
    return values


def load_settings(
    path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> InstallerSettings:
    """Load and validate installer settings.

    Args:
        path: Explicit YAML file. If None, ``installer.yml`` in the cwd is
            used when present; otherwise YAML is skipped.
        env: Environment mapping (default: ``os.environ``).
        overrides: Values from CLI flags. ``None`` entries are ignored.

    Returns:
        Validated InstallerSettings.

    Raises:
        ConfigError: If the file is missing or any value is invalid.
    """
    if path is None:
        path = find_config_file()

    data: dict[str, Any] = {}
    if path is not None:
        data.update(_read_yaml(path))

    data.update(_read_env(os.environ if env is None else env))

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = InstallerSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.info(
        "Settings: repo=%s version=%s nvidia=%s portable=%s",
        settings.repo, settings.version,
        settings.nvidia.value, settings.portable.value,
    )
    return settings
