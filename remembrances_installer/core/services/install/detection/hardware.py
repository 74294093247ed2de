"""
L3 Detection: GPU, CUDA runtime, and CPU SIMD probes.

Read-only system probes: nvidia-smi, ldconfig -p, well-known CUDA
paths, /proc/cpuinfo. Nothing here raises: an absent signal degrades
to ``False`` / unknown and is logged.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path

from remembrances_installer.core.models.capability import CapabilityProfile
from remembrances_installer.core.models.platform import PlatformTuple
from remembrances_installer.core.services.install.data.constants import (
    CPUINFO_PATH,
    CUDA_RUNTIME_SONAME,
    CUDA_WELL_KNOWN_PATHS,
    GPU_MANAGEMENT_COMMAND,
    PROBE_TIMEOUT,
)
from remembrances_installer.core.services.install.detection.shared_libs import (
    read_linker_cache,
    soname_in_cache,
)
from remembrances_installer.core.services.install.domain.strategies import (
    Strategy,
    first_definite,
)

logger = logging.getLogger(__name__)

_CUDA_VERSION_RE = re.compile(r"CUDA Version:\s*(\d+)\.\d+")


# ── GPU helpers ────────────────────────────────────────────

def _run_nvidia_smi() -> subprocess.CompletedProcess | None:
    """Run the GPU management command once; None if it is not installed."""
    if not shutil.which(GPU_MANAGEMENT_COMMAND):
        return None
    try:
        return subprocess.run(
            [GPU_MANAGEMENT_COMMAND],
            capture_output=True, text=True, timeout=PROBE_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as exc:
        logger.warning("%s could not be run: %s", GPU_MANAGEMENT_COMMAND, exc)
        return None


def gpu_present(smi: subprocess.CompletedProcess | None) -> bool:
    """NVIDIA GPU usable iff nvidia-smi exists and exits 0.

    A driver that is installed but not loaded looks the same as no GPU.
    """
    if smi is None:
        return False
    if smi.returncode != 0:
        logger.warning(
            "%s is installed but failed (exit %d); treating GPU as absent",
            GPU_MANAGEMENT_COMMAND, smi.returncode,
        )
        return False
    return True


# ── CUDA version strategies ────────────────────────────────

def cuda_from_driver(smi: subprocess.CompletedProcess | None) -> int | None:
    """Parse the driver-reported ``CUDA Version: X.Y`` header."""
    if smi is None or not smi.stdout:
        return None
    m = _CUDA_VERSION_RE.search(smi.stdout)
    return int(m.group(1)) if m else None


def cuda_from_linker_cache(cache: str | None) -> int | None:
    """CUDA 12 if ``libcudart.so.12`` is registered with the loader."""
    return 12 if soname_in_cache(CUDA_RUNTIME_SONAME, cache) else None


def cuda_from_paths(paths: Iterable[str] = CUDA_WELL_KNOWN_PATHS) -> int | None:
    """CUDA 12 if the runtime sits in a well-known toolkit location."""
    for p in paths:
        if Path(p).is_file():
            return 12
    return None


def detect_cuda_major_version(
    smi: subprocess.CompletedProcess | None = None,
    cache: str | None = None,
) -> int | None:
    """Resolve the CUDA major version, first definite strategy wins.

    Args:
        smi: Output of a previous nvidia-smi run, if any.
        cache: ``ldconfig -p`` listing. Read lazily when not supplied.

    Returns:
        The major version, or None when unknown (not an error).
    """
    resolution = first_definite([
        Strategy("nvidia-smi", lambda: cuda_from_driver(smi)),
        Strategy(
            "ldconfig",
            lambda: cuda_from_linker_cache(cache if cache is not None else read_linker_cache()),
        ),
        Strategy("well-known-paths", cuda_from_paths),
    ])
    if resolution.value is None:
        logger.warning("CUDA version unknown/not found")
    else:
        logger.info("CUDA %s.x detected via %s", resolution.value, resolution.strategy)
    return resolution.value  # type: ignore[return-value]


# ── CPU feature helpers ────────────────────────────────────

def read_cpu_flags(cpuinfo_path: str | Path = CPUINFO_PATH) -> set[str] | None:
    """Collect the ``flags`` tokens from /proc/cpuinfo.

    Returns None if the listing is unavailable (macOS, containers
    without /proc).
    """
    flags: set[str] = set()
    try:
        with open(cpuinfo_path, encoding="utf-8", errors="replace") as f:
            for line in f:
                key, sep, value = line.partition(":")
                if sep and key.strip().lower() == "flags":
                    flags.update(value.lower().split())
    except OSError as exc:
        logger.warning("CPU feature listing unavailable (%s): %s", cpuinfo_path, exc)
        return None
    return flags


def cpu_has_feature(feature: str, flags: set[str] | None) -> bool:
    return flags is not None and feature in flags


# ── Profile ─────────────────────────────────────────────────

def probe(plat: PlatformTuple, *, cpuinfo_path: str | Path = CPUINFO_PATH) -> CapabilityProfile:
    """Probe GPU / CUDA / SIMD capabilities.

    Only (linux, amd64) is probed. Every other platform gets the
    all-unknown profile without touching the system.
    """
    if not plat.is_linux_amd64:
        logger.info("Skipping capability probing on %s", plat.label())
        return CapabilityProfile.unknown()

    smi = _run_nvidia_smi()
    has_gpu = gpu_present(smi)
    # Without a working driver the CUDA build is never chosen by default
    cuda_major = detect_cuda_major_version(smi) if has_gpu else None

    flags = read_cpu_flags(cpuinfo_path)
    profile = CapabilityProfile(
        has_nvidia_gpu=has_gpu,
        cuda_major_version=cuda_major,
        has_avx2=cpu_has_feature("avx2", flags),
        has_avx512=cpu_has_feature("avx512f", flags),
    )
    logger.info(
        "Capabilities: nvidia_gpu=%s cuda=%s avx2=%s avx512=%s",
        profile.has_nvidia_gpu,
        f"{cuda_major}.x" if cuda_major is not None else "unknown",
        profile.has_avx2, profile.has_avx512,
    )
    return profile
