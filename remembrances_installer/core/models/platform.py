"""
Platform model: the normalized (OS, architecture) tuple.

Only two tuples are installable: (linux, amd64) and (darwin, aarch64).
Everything else is terminal for the run.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class OSFamily(str, Enum):
    """Operating system family as used in release asset names."""

    LINUX = "linux"
    DARWIN = "darwin"
    UNSUPPORTED = "unsupported"


class Arch(str, Enum):
    """CPU architecture as used in release asset names."""

    AMD64 = "amd64"
    AARCH64 = "aarch64"
    UNSUPPORTED = "unsupported"


SUPPORTED_PLATFORMS: frozenset[tuple[OSFamily, Arch]] = frozenset({
    (OSFamily.LINUX, Arch.AMD64),
    (OSFamily.DARWIN, Arch.AARCH64),
})


class PlatformTuple(BaseModel):
    """Host platform, computed once per run."""

    model_config = ConfigDict(frozen=True)

    os: OSFamily
    arch: Arch
    raw_os: str = ""       # e.g. "Linux" from uname -s
    raw_arch: str = ""     # e.g. "x86_64" from uname -m

    @property
    def is_supported(self) -> bool:
        return (self.os, self.arch) in SUPPORTED_PLATFORMS

    @property
    def is_linux_amd64(self) -> bool:
        return self.os is OSFamily.LINUX and self.arch is Arch.AMD64

    @property
    def is_darwin_aarch64(self) -> bool:
        return self.os is OSFamily.DARWIN and self.arch is Arch.AARCH64

    def label(self) -> str:
        return f"{self.os.value}/{self.arch.value}"
