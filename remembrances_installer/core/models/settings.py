"""
InstallerSettings: effective configuration for one install run.

Built by ``core.config.loader.load_settings`` from defaults, an optional
YAML file, ``REMEMBRANCES_*`` environment variables and CLI flags.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from remembrances_installer.core.models.capability import Override
from remembrances_installer.core.services.install.data.constants import (
    APP_NAME,
    CUDA_LIBS_URL,
    DEFAULT_REPO,
    GGUF_MODEL_NAME,
    GGUF_MODEL_URL,
)


class InstallerSettings(BaseModel):
    """User-facing knobs. Overrides are three-valued (unset/yes/no)."""

    model_config = ConfigDict(extra="forbid")

    app: str = APP_NAME
    repo: str = DEFAULT_REPO
    version: str = "latest"

    nvidia: Override = Override.UNSET
    portable: Override = Override.UNSET
    download_model: Override = Override.UNSET
    skip_cuda_libs: bool = False

    cuda_libs_url: str = CUDA_LIBS_URL
    model_url: str = GGUF_MODEL_URL
    model_name: str = GGUF_MODEL_NAME

    http_timeout: int = Field(default=60, gt=0)

    @field_validator("nvidia", "portable", "download_model", mode="before")
    @classmethod
    def _parse_override(cls, value: object) -> Override:
        return Override.parse(value)

    @field_validator("version", mode="before")
    @classmethod
    def _default_version(cls, value: object) -> str:
        text = str(value or "").strip()
        return text or "latest"
