"""
L4 Execution: Archive extraction.

Release assets are ``.zip``; the CUDA runtime bundle is ``.tar.xz``.
Both are extracted in-process with the standard library.
"""

from __future__ import annotations

import logging
import tarfile
import zipfile
from pathlib import Path

from remembrances_installer.core.errors import ArchiveError

logger = logging.getLogger(__name__)


def extract_archive(archive: Path, dest: Path) -> Path:
    """Extract ``archive`` into ``dest``.

    Raises:
        ArchiveError: Unknown format, missing codec (e.g. no lzma
            support for ``.tar.xz``), or a corrupt archive.
    """
    dest.mkdir(parents=True, exist_ok=True)
    logger.info("Extracting %s", archive.name)
    try:
        if zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(dest)
        elif tarfile.is_tarfile(archive):
            with tarfile.open(archive, "r:*") as tar:
                tar.extractall(dest, filter="data")
        else:
            raise ArchiveError(f"Unsupported archive format: {archive.name}")
    except (zipfile.BadZipFile, tarfile.TarError) as exc:
        raise ArchiveError(f"Cannot extract {archive.name}: {exc}") from exc
    except OSError as exc:
        raise ArchiveError(f"Cannot extract {archive.name}: {exc}") from exc
    return dest


def extracted_root(dest: Path) -> Path:
    """The archive's top-level folder, or ``dest`` if files sit at the root."""
    dirs = sorted(p for p in dest.iterdir() if p.is_dir())
    return dirs[0] if dirs else dest


def find_shared_libraries(root: Path) -> list[Path]:
    """All ``*.so`` / ``*.so.*`` files below ``root``, symlinks included."""
    found = [
        p for p in sorted(root.rglob("*"))
        if p.is_file()
        and (p.name.endswith(".so") or ".so." in p.name)
    ]
    return found
