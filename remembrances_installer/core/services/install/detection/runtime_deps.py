"""
L3 Detection: CUDA runtime dependency validation.

Decides whether the dynamic loader can satisfy the CUDA libraries that
the NVIDIA build of the native library links against.

Two strategies, in precedence order:

1. ``ldd`` on the installed library. Authoritative when it gives a
   definite answer; indeterminate when the output names none of the
   required SONAMEs.
2. Presence check of each SONAME in the linker cache and the common
   library directories. The fallback of record.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path

from remembrances_installer.core.models.validation import ValidationOutcome
from remembrances_installer.core.services.install.data.constants import (
    CUDA_DEPENDENT_LIBRARY,
    LIBRARY_SEARCH_DIRS,
    PROBE_TIMEOUT,
    REQUIRED_CUDA_SONAMES,
)
from remembrances_installer.core.services.install.detection.shared_libs import (
    read_linker_cache,
    shared_lib_exists,
)

logger = logging.getLogger(__name__)


def locate_cuda_library(bin_dir: Path | None, cwd: Path | None = None) -> Path | None:
    """Find the CUDA-dependent native library: bin dir first, then cwd."""
    candidates = []
    if bin_dir is not None:
        candidates.append(bin_dir / CUDA_DEPENDENT_LIBRARY)
    candidates.append((cwd or Path.cwd()) / CUDA_DEPENDENT_LIBRARY)
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


# ── Strategy 1: ldd ────────────────────────────────────────

def parse_ldd_output(
    output: str,
    sonames: Iterable[str] = REQUIRED_CUDA_SONAMES,
) -> ValidationOutcome:
    """Interpret ``ldd`` output for the required SONAMEs.

    ``ldd`` output is localized on some systems; only the literal
    ``not found`` marker is relied upon.
    """
    sonames = tuple(sonames)
    referenced: set[str] = set()
    missing: list[str] = []
    for line in output.splitlines():
        for soname in sonames:
            if soname not in line:
                continue
            referenced.add(soname)
            if "not found" in line and soname not in missing:
                missing.append(soname)

    if missing:
        return ValidationOutcome.missing_libs(missing, strategy="ldd")
    if not referenced:
        return ValidationOutcome.indeterminate(strategy="ldd")
    return ValidationOutcome.resolvable(strategy="ldd")


def check_with_ldd(library_path: Path) -> ValidationOutcome:
    """Ask the loader what it can resolve for ``library_path``."""
    if not library_path.is_file():
        logger.debug("No CUDA library at %s", library_path)
        return ValidationOutcome.indeterminate(strategy="ldd")
    if not shutil.which("ldd"):
        logger.debug("ldd not available")
        return ValidationOutcome.indeterminate(strategy="ldd")
    try:
        r = subprocess.run(
            ["ldd", str(library_path)],
            capture_output=True, text=True, timeout=PROBE_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as exc:
        logger.warning("ldd failed on %s: %s", library_path, exc)
        return ValidationOutcome.indeterminate(strategy="ldd")
    return parse_ldd_output(r.stdout)


# ── Strategy 2: presence ───────────────────────────────────

def check_presence(
    sonames: Iterable[str] = REQUIRED_CUDA_SONAMES,
    *,
    cache: str | None = None,
    dirs: Iterable[str | Path] = LIBRARY_SEARCH_DIRS,
) -> ValidationOutcome:
    """Look for every SONAME in the linker cache, then in ``dirs``."""
    if cache is None:
        cache = read_linker_cache()
    dirs = tuple(dirs)
    missing = [
        soname for soname in sonames
        if not shared_lib_exists(soname, cache=cache, dirs=dirs)
    ]
    if missing:
        return ValidationOutcome.missing_libs(missing, strategy="presence")
    return ValidationOutcome.resolvable(strategy="presence")


def validate(library_path: Path | None) -> ValidationOutcome:
    """Decide whether the CUDA runtime of the installed library resolves.

    Args:
        library_path: The installed CUDA-dependent library, or None when
            it could not be located (goes straight to the presence check).

    Returns:
        A definite ValidationOutcome (resolvable or missing libs).
    """
    if library_path is not None:
        outcome = check_with_ldd(library_path)
        if outcome.is_definite:
            logger.info("ldd on %s: %s", library_path, outcome.status.value)
            return outcome
        logger.info("ldd gave no CUDA signal for %s; checking library presence", library_path)

    outcome = check_presence()
    if outcome.is_resolvable:
        logger.info("CUDA runtime libraries present")
    else:
        for soname in outcome.missing:
            logger.warning("Missing CUDA runtime library: %s", soname)
    return outcome
