"""
L3 Detection: Platform identification.

Normalizes ``uname -s`` / ``uname -m`` into a PlatformTuple and gates
the rest of the run on the two supported tuples.
"""

from __future__ import annotations

import logging
import platform

from remembrances_installer.core.errors import UnsupportedPlatformError
from remembrances_installer.core.models.platform import Arch, OSFamily, PlatformTuple

logger = logging.getLogger(__name__)

_ARCH_MAP: dict[str, Arch] = {
    "x86_64": Arch.AMD64,
    "amd64": Arch.AMD64,
    "arm64": Arch.AARCH64,
    "aarch64": Arch.AARCH64,
}


def _os_family(raw: str) -> OSFamily:
    name = raw.strip().lower()
    if name.startswith("linux"):
        return OSFamily.LINUX
    if name.startswith("darwin"):
        return OSFamily.DARWIN
    return OSFamily.UNSUPPORTED


def _arch(raw: str) -> Arch:
    return _ARCH_MAP.get(raw.strip().lower(), Arch.UNSUPPORTED)


def identify(system: str | None = None, machine: str | None = None) -> PlatformTuple:
    """Identify the host platform.

    Args:
        system: Raw OS name (default: ``platform.system()``).
        machine: Raw machine architecture (default: ``platform.machine()``).

    Returns:
        PlatformTuple; either axis may be ``unsupported``.
    """
    raw_os = platform.system() if system is None else system
    raw_arch = platform.machine() if machine is None else machine
    result = PlatformTuple(
        os=_os_family(raw_os),
        arch=_arch(raw_arch),
        raw_os=raw_os,
        raw_arch=raw_arch,
    )
    logger.info("Detected platform: %s (raw %s/%s)", result.label(), raw_os, raw_arch)
    return result


def require_supported(plat: PlatformTuple) -> PlatformTuple:
    """Raise unless ``plat`` is one of the installable tuples.

    Raises:
        UnsupportedPlatformError: With a message naming the failing axis.
    """
    if plat.os is OSFamily.UNSUPPORTED:
        raise UnsupportedPlatformError(
            f"Unsupported operating system: {plat.raw_os or 'unknown'}. "
            "This installer supports Linux and macOS only."
        )
    if plat.arch is Arch.UNSUPPORTED:
        raise UnsupportedPlatformError(
            f"Unsupported architecture: {plat.raw_arch or 'unknown'}. "
            "This installer supports amd64 and aarch64/arm64 only."
        )
    if plat.os is OSFamily.DARWIN and plat.arch is not Arch.AARCH64:
        raise UnsupportedPlatformError(
            f"Unsupported macOS architecture: {plat.raw_arch}. "
            "Only Apple Silicon (aarch64/arm64) is supported."
        )
    if plat.os is OSFamily.LINUX and plat.arch is not Arch.AMD64:
        raise UnsupportedPlatformError(
            f"Unsupported Linux architecture: {plat.raw_arch}. "
            "Only x86_64 (amd64) is supported."
        )
    return plat
