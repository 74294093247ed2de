"""
Release models: the asset catalog of a single GitHub release.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ReleaseVariant(str, Enum):
    """Every release artifact the installer knows how to pick.

    The value is the filename suffix after ``<app>-``.
    """

    DARWIN_EMBEDDED = "darwin-aarch64-embedded.zip"
    LINUX_CUDA_PORTABLE_EMBEDDED = "embedded-cuda-portable-linux-x86_64.zip"
    LINUX_CUDA_EMBEDDED = "embedded-cuda-linux-x86_64.zip"
    LINUX_CPU_EMBEDDED = "embedded-cpu-linux-x86_64.zip"
    LINUX_CPU = "cpu-linux-x86_64.zip"

    def filename(self, app: str) -> str:
        return f"{app}-{self.value}"

    @property
    def is_cuda(self) -> bool:
        return self in (
            ReleaseVariant.LINUX_CUDA_PORTABLE_EMBEDDED,
            ReleaseVariant.LINUX_CUDA_EMBEDDED,
        )


class AssetDescriptor(BaseModel):
    """One downloadable file attached to a release."""

    model_config = ConfigDict(frozen=True)

    filename: str
    download_url: str
    size_bytes: int = 0


class ReleaseManifest(BaseModel):
    """Release metadata: a tag plus its asset list (may be incomplete)."""

    tag: str
    assets: list[AssetDescriptor] = Field(default_factory=list)

    @classmethod
    def from_github(cls, data: dict[str, Any]) -> ReleaseManifest:
        """Build a manifest from a GitHub ``/releases`` API payload."""
        assets = [
            AssetDescriptor(
                filename=a.get("name", ""),
                download_url=a.get("browser_download_url", ""),
                size_bytes=a.get("size", 0) or 0,
            )
            for a in data.get("assets", [])
            if a.get("browser_download_url")
        ]
        return cls(tag=data.get("tag_name", "") or "", assets=assets)

    def find(self, filename: str) -> AssetDescriptor | None:
        """First asset whose name ends with ``filename``."""
        for asset in self.assets:
            if asset.filename.endswith(filename):
                return asset
        return None

    def embedded_assets(self) -> list[str]:
        return [a.filename for a in self.assets if "embedded" in a.filename]


class AssetResolution(BaseModel):
    """Outcome of looking up the selected filename in a manifest."""

    requested_filename: str
    filename: str
    asset: AssetDescriptor | None = None
    fell_back: bool = False

    @property
    def found(self) -> bool:
        return self.asset is not None
