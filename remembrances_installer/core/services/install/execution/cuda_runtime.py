"""
L4 Execution: CUDA runtime bundle installation.

Applies a RemediationPlan: download the runtime-library archive,
extract it, and copy every shared object into the user library
directory. The caller then extends LD_LIBRARY_PATH for future shells.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from remembrances_installer.core.errors import (
    ArchiveError,
    DownloadError,
    RemediationError,
)
from remembrances_installer.core.services.install.domain.remediation_planning import (
    RemediationPlan,
)
from remembrances_installer.core.services.install.execution.archive import (
    extract_archive,
    find_shared_libraries,
)
from remembrances_installer.core.services.install.execution.download import download_file

logger = logging.getLogger(__name__)


@dataclass
class RemediationResult:
    """What the bundle install actually did."""

    applied: bool = False
    copied: list[str] = field(default_factory=list)
    target_dir: Path | None = None

    @property
    def needs_ld_library_path(self) -> bool:
        return bool(self.copied)

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "copied": list(self.copied),
            "target_dir": str(self.target_dir) if self.target_dir else None,
            "needs_ld_library_path": self.needs_ld_library_path,
        }


def apply_remediation(plan: RemediationPlan, *, timeout: int = 60) -> RemediationResult:
    """Install the CUDA runtime bundle described by ``plan``.

    Raises:
        RemediationError: If the bundle cannot be downloaded or
            extracted. Already-installed files are left untouched.
    """
    if not plan.needed:
        return RemediationResult()
    if plan.skipped:
        logger.warning("Skipping CUDA runtime libs download (REMEMBRANCES_SKIP_CUDA_LIBS=yes)")
        return RemediationResult(target_dir=plan.target_dir)
    if plan.target_dir is None:
        raise RemediationError("No target directory for CUDA runtime libraries")

    target = plan.target_dir
    archive_name = Path(urlparse(plan.bundle_url).path).name or "cuda-libs.tar.xz"
    result = RemediationResult(applied=True, target_dir=target)

    with tempfile.TemporaryDirectory(prefix="remembrances-cuda-") as tmp:
        tmp_dir = Path(tmp)
        logger.info("Downloading CUDA runtime libraries (CUDA 12+)")
        try:
            archive = download_file(plan.bundle_url, tmp_dir / archive_name, timeout=timeout)
            extract_archive(archive, tmp_dir / "extracted")
        except (DownloadError, ArchiveError) as exc:
            raise RemediationError(f"CUDA runtime bundle install failed: {exc}") from exc

        try:
            target.mkdir(parents=True, exist_ok=True)
            for lib in find_shared_libraries(tmp_dir / "extracted"):
                dest = target / lib.name
                if dest.is_symlink() or dest.exists():
                    dest.unlink()
                shutil.copy2(lib, dest, follow_symlinks=False)
                result.copied.append(lib.name)
        except OSError as exc:
            raise RemediationError(f"Cannot copy CUDA libraries to {target}: {exc}") from exc

    if result.copied:
        logger.info("Installed %d CUDA libraries to %s", len(result.copied), target)
    else:
        logger.warning(
            "No .so CUDA libraries found in the archive; the bundle format may have changed"
        )
    return result
