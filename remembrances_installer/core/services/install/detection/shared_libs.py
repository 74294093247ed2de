"""
L3 Detection: Shared library lookup.

Read-only checks for a SONAME in the dynamic-linker cache
(``ldconfig -p``) and in a fixed list of library directories.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path

from remembrances_installer.core.services.install.data.constants import (
    LIBRARY_SEARCH_DIRS,
    PROBE_TIMEOUT,
)

logger = logging.getLogger(__name__)


def read_linker_cache() -> str | None:
    """Return ``ldconfig -p`` output, or None if the cache can't be listed."""
    ldconfig = shutil.which("ldconfig")
    if not ldconfig:
        # Debian keeps ldconfig in /sbin, which is often not on a user's PATH
        for candidate in ("/sbin/ldconfig", "/usr/sbin/ldconfig"):
            if Path(candidate).is_file():
                ldconfig = candidate
                break
    if not ldconfig:
        logger.debug("ldconfig not available")
        return None
    try:
        r = subprocess.run(
            [ldconfig, "-p"],
            capture_output=True, text=True, timeout=PROBE_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as exc:
        logger.debug("ldconfig -p failed: %s", exc)
        return None
    if r.returncode != 0:
        return None
    return r.stdout


def soname_in_cache(soname: str, cache: str | None) -> bool:
    """True if ``soname`` appears as a whole word in the ldconfig listing."""
    if not cache:
        return False
    pattern = rf"(?<![\w.]){re.escape(soname)}(?![\w])"
    return re.search(pattern, cache) is not None


def _matches(name: str, soname: str) -> bool:
    # Exact name or a dotted version suffix: libcublas.so.12.6.4.1
    return name == soname or name.startswith(soname + ".")


def soname_in_dirs(soname: str, dirs: Iterable[str | Path] = LIBRARY_SEARCH_DIRS) -> Path | None:
    """Return the first matching library file across ``dirs``, in order."""
    for d in dirs:
        directory = Path(d)
        exact = directory / soname
        if exact.exists():
            return exact
        try:
            for entry in sorted(directory.glob(soname + ".*")):
                if _matches(entry.name, soname):
                    return entry
        except OSError:
            continue
    return None


def shared_lib_exists(
    soname: str,
    *,
    cache: str | None = None,
    dirs: Iterable[str | Path] = LIBRARY_SEARCH_DIRS,
) -> bool:
    """Check the linker cache first, then the fixed directory list."""
    if soname_in_cache(soname, cache):
        logger.debug("%s found in ldconfig cache", soname)
        return True
    found = soname_in_dirs(soname, dirs)
    if found:
        logger.debug("%s found at %s", soname, found)
        return True
    return False
