"""
Shared test fixtures and configuration.
"""

import subprocess
from pathlib import Path

import pytest

from remembrances_installer.core.models import (
    Arch,
    AssetDescriptor,
    OSFamily,
    PlatformTuple,
    ReleaseManifest,
    ReleaseVariant,
)
from remembrances_installer.core.services.install.data.constants import APP_NAME

RELEASE_TAG = "v1.17.0"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    """Keep the developer's REMEMBRANCES_* variables out of every test."""
    import os

    for var in list(os.environ):
        if var.startswith("REMEMBRANCES_"):
            monkeypatch.delenv(var, raising=False)


@pytest.fixture
def linux_amd64() -> PlatformTuple:
    return PlatformTuple(os=OSFamily.LINUX, arch=Arch.AMD64, raw_os="Linux", raw_arch="x86_64")


@pytest.fixture
def darwin_arm64() -> PlatformTuple:
    return PlatformTuple(os=OSFamily.DARWIN, arch=Arch.AARCH64, raw_os="Darwin", raw_arch="arm64")


def make_manifest(*variants: ReleaseVariant, tag: str = RELEASE_TAG) -> ReleaseManifest:
    """Manifest carrying one asset per given variant."""
    assets = [
        AssetDescriptor(
            filename=v.filename(APP_NAME),
            download_url=f"https://example.invalid/{tag}/{v.filename(APP_NAME)}",
            size_bytes=1024,
        )
        for v in variants
    ]
    return ReleaseManifest(tag=tag, assets=assets)


@pytest.fixture
def full_manifest() -> ReleaseManifest:
    """A release that ships every known variant."""
    return make_manifest(*ReleaseVariant)


def completed(stdout: str = "", returncode: int = 0) -> subprocess.CompletedProcess:
    """Fake subprocess result."""
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


@pytest.fixture
def cpuinfo(tmp_path: Path):
    """Factory: write a /proc/cpuinfo lookalike with the given flags."""

    def _write(*flags: str) -> Path:
        path = tmp_path / "cpuinfo"
        path.write_text(
            "processor\t: 0\n"
            "vendor_id\t: GenuineIntel\n"
            f"flags\t\t: fpu vme sse sse2 {' '.join(flags)}\n"
            "\n"
        )
        return path

    return _write
