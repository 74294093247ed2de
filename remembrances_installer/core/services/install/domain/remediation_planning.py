"""
L1 Domain: CUDA runtime remediation planning (pure).

Turns a ValidationOutcome into a RemediationPlan: whether the runtime
library bundle must be fetched, where its libraries go, and whether
configuration asked to skip it. Execution lives in
``execution.cuda_runtime``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from remembrances_installer.core.models.settings import InstallerSettings
from remembrances_installer.core.models.validation import (
    ValidationOutcome,
    ValidationStatus,
)


def user_lib_dir(home: Path) -> Path:
    """User-writable directory that receives the bundled libraries."""
    return home / ".local" / "lib"


@dataclass(frozen=True)
class RemediationPlan:
    """What to do about unresolvable CUDA libraries."""

    needed: bool = False
    skipped: bool = False
    bundle_url: str = ""
    target_dir: Path | None = None
    missing: tuple[str, ...] = field(default_factory=tuple)

    @property
    def should_apply(self) -> bool:
        return self.needed and not self.skipped

    def to_dict(self) -> dict:
        return {
            "needed": self.needed,
            "skipped": self.skipped,
            "bundle_url": self.bundle_url,
            "target_dir": str(self.target_dir) if self.target_dir else None,
            "missing": list(self.missing),
        }


def plan_remediation(
    outcome: ValidationOutcome,
    settings: InstallerSettings,
    home: Path,
) -> RemediationPlan:
    """Decide whether to install the CUDA runtime bundle.

    Only ``MISSING_LIBS`` triggers remediation; a resolvable or
    indeterminate outcome yields an empty plan.
    """
    if outcome.status is not ValidationStatus.MISSING_LIBS:
        return RemediationPlan()
    return RemediationPlan(
        needed=True,
        skipped=settings.skip_cuda_libs,
        bundle_url=settings.cuda_libs_url,
        target_dir=user_lib_dir(home),
        missing=outcome.missing,
    )
