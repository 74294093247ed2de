"""
L5 Orchestration: The sequential install run.

    identify → release metadata → probe → preference → select/resolve
    → download/extract → install files → validate CUDA runtime
    → remediate → config → model → shell setup

Fatal conditions raise ``InstallError`` subclasses and abort the run.
Nothing already copied is rolled back. A failed CUDA remediation is
recorded on the result and the run continues without GPU acceleration.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from remembrances_installer.core.errors import (
    AssetNotFoundError,
    RemediationError,
    UnsupportedPlatformError,
)
from remembrances_installer.core.models.capability import (
    CapabilityProfile,
    Override,
    VariantPreference,
)
from remembrances_installer.core.models.platform import OSFamily, PlatformTuple
from remembrances_installer.core.models.release import AssetResolution, ReleaseManifest
from remembrances_installer.core.models.settings import InstallerSettings
from remembrances_installer.core.models.validation import ValidationOutcome
from remembrances_installer.core.services.install.detection.hardware import probe
from remembrances_installer.core.services.install.detection.platform_id import (
    identify,
    require_supported,
)
from remembrances_installer.core.services.install.detection.runtime_deps import (
    locate_cuda_library,
    validate,
)
from remembrances_installer.core.services.install.domain.asset_selection import (
    default_preference,
    resolve_asset,
    select_variant,
)
from remembrances_installer.core.services.install.domain.preference import (
    Prompter,
    resolve_preference,
)
from remembrances_installer.core.services.install.domain.remediation_planning import (
    RemediationPlan,
    plan_remediation,
)
from remembrances_installer.core.services.install.execution.archive import (
    extract_archive,
    extracted_root,
)
from remembrances_installer.core.services.install.execution.config import write_config
from remembrances_installer.core.services.install.execution.cuda_runtime import (
    RemediationResult,
    apply_remediation,
)
from remembrances_installer.core.services.install.execution.download import (
    download_file,
    download_model,
)
from remembrances_installer.core.services.install.execution.file_install import (
    InstallLayout,
    install_layout,
    install_release,
)
from remembrances_installer.core.services.install.execution.release_client import (
    fetch_release_manifest,
)
from remembrances_installer.core.services.install.execution.shell_setup import (
    setup_shell,
    shell_config_files,
)

logger = logging.getLogger(__name__)

TOTAL_STEPS = 10
MODEL_QUESTION = "Do you want to download the GGUF embedding model (~260MB)?"

ProgressCallback = Callable[[int, str], None]


class _Progress:
    """Numbered step reporter: ``[pct%] label``."""

    def __init__(self, callback: ProgressCallback | None, total: int = TOTAL_STEPS):
        self._callback = callback
        self._total = total
        self._current = 0

    def step(self, label: str) -> None:
        self._current += 1
        pct = (self._current * 100) // self._total
        logger.info("[%d%%] %s", pct, label)
        if self._callback is not None:
            self._callback(pct, label)


@dataclass
class HostReport:
    """Platform + capabilities + the build that would be chosen."""

    platform: PlatformTuple
    profile: CapabilityProfile
    default_preference: VariantPreference
    preference: VariantPreference
    filename: str | None

    def to_dict(self) -> dict:
        return {
            "platform": {
                "os": self.platform.os.value,
                "arch": self.platform.arch.value,
                "supported": self.platform.is_supported,
            },
            "capabilities": self.profile.to_dict(),
            "default_preference": self.default_preference.model_dump(),
            "preference": self.preference.model_dump(),
            "filename": self.filename,
        }


@dataclass
class InstallResult:
    """Everything the run decided and did, for the summary and --json."""

    platform: PlatformTuple | None = None
    profile: CapabilityProfile | None = None
    preference: VariantPreference | None = None
    release_tag: str = ""
    embedded_assets: list[str] = field(default_factory=list)
    resolution: AssetResolution | None = None
    layout: InstallLayout | None = None
    installed: dict = field(default_factory=dict)
    validation: ValidationOutcome | None = None
    remediation_plan: RemediationPlan | None = None
    remediation: RemediationResult | None = None
    remediation_error: str | None = None
    config_file: Path | None = None
    model_path: Path | None = None
    model_downloaded: bool | None = None
    shell: dict = field(default_factory=dict)
    dry_run: bool = False

    @property
    def gpu_acceleration_ready(self) -> bool:
        if self.validation is None:
            return False
        if self.validation.is_resolvable:
            return True
        return bool(self.remediation and self.remediation.needs_ld_library_path)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        result: dict = {"dry_run": self.dry_run, "release": self.release_tag}
        if self.platform:
            result["platform"] = {"os": self.platform.os.value, "arch": self.platform.arch.value}
        if self.profile:
            result["capabilities"] = self.profile.to_dict()
        if self.preference:
            result["preference"] = self.preference.model_dump()
        if self.resolution:
            result["asset"] = {
                "filename": self.resolution.filename,
                "requested": self.resolution.requested_filename,
                "fell_back": self.resolution.fell_back,
                "url": self.resolution.asset.download_url if self.resolution.asset else None,
            }
        if self.layout:
            result["layout"] = self.layout.to_dict()
        if self.installed:
            result["installed"] = self.installed
        if self.validation:
            result["validation"] = self.validation.to_dict()
        if self.remediation_plan:
            result["remediation_plan"] = self.remediation_plan.to_dict()
        if self.remediation:
            result["remediation"] = self.remediation.to_dict()
        if self.remediation_error:
            result["remediation_error"] = self.remediation_error
        if self.config_file:
            result["config_file"] = str(self.config_file)
        if self.model_path:
            result["model"] = {
                "path": str(self.model_path),
                "downloaded": self.model_downloaded,
            }
        if self.shell:
            result["shell"] = self.shell
        return result


# ── Detection-only entry point ─────────────────────────────

def describe_host(
    settings: InstallerSettings,
    *,
    system: str | None = None,
    machine: str | None = None,
) -> HostReport:
    """Identify and probe the host, then apply overrides (never prompts).

    Raises:
        UnsupportedPlatformError: For any non-installable platform.
    """
    plat = require_supported(identify(system, machine))
    profile = probe(plat)
    pref = resolve_preference(
        plat, profile, nvidia=settings.nvidia, portable=settings.portable,
    )
    variant = select_variant(plat, pref)
    return HostReport(
        platform=plat,
        profile=profile,
        default_preference=default_preference(plat, profile),
        preference=pref,
        filename=variant.filename(settings.app) if variant else None,
    )


# ── Full run ────────────────────────────────────────────────

def _should_download_model(settings: InstallerSettings, prompter: Prompter | None) -> bool:
    if settings.download_model is Override.NO:
        logger.warning("Skipping GGUF model download (from env var)")
        return False
    if settings.download_model is Override.YES:
        return True
    if prompter is None:
        return True
    return prompter.ask_yes_no(MODEL_QUESTION, True)


def _check_cuda_runtime(
    result: InstallResult,
    settings: InstallerSettings,
    home: Path,
    timeout: int,
) -> None:
    """Validate the CUDA runtime of the installed build; remediate if needed."""
    assert result.layout is not None and result.profile is not None
    library = locate_cuda_library(result.layout.bin_dir)
    outcome = validate(library)
    result.validation = outcome

    if outcome.is_resolvable:
        cuda_major = result.profile.cuda_major_version
        if cuda_major is not None:
            logger.info("CUDA runtime detected (CUDA %d.x and required libs present)", cuda_major)
        else:
            logger.info("CUDA runtime detected (required libs present)")
        return

    logger.warning(
        "NVIDIA build selected but CUDA runtime libraries were not found "
        "in the system loader paths: %s", ", ".join(outcome.missing),
    )
    plan = plan_remediation(outcome, settings, home)
    result.remediation_plan = plan
    try:
        result.remediation = apply_remediation(plan, timeout=timeout)
    except RemediationError as exc:
        # The application is installed; only GPU acceleration is lost
        logger.error("%s", exc)
        result.remediation_error = str(exc)


def run_install(
    settings: InstallerSettings,
    *,
    prompter: Prompter | None = None,
    home: Path | None = None,
    dry_run: bool = False,
    progress: ProgressCallback | None = None,
    system: str | None = None,
    machine: str | None = None,
    manifest: ReleaseManifest | None = None,
) -> InstallResult:
    """Run the installer end to end.

    Args:
        settings: Effective installer settings.
        prompter: Wizard question source; None means non-interactive.
        home: Home directory (default: ``Path.home()``).
        dry_run: Stop after the asset is resolved.
        progress: Called with ``(percent, label)`` at each step.
        system / machine: Raw platform strings (default: this host).
        manifest: Pre-fetched release metadata (skips the API call).

    Returns:
        InstallResult describing every decision and action.

    Raises:
        InstallError: On any fatal condition.
    """
    home = home or Path.home()
    steps = _Progress(progress, total=TOTAL_STEPS)
    result = InstallResult(dry_run=dry_run)

    steps.step("Detecting platform")
    plat = require_supported(identify(system, machine))
    result.platform = plat

    steps.step("Fetching release metadata")
    if manifest is None:
        manifest = fetch_release_manifest(
            settings.repo, settings.version, timeout=settings.http_timeout,
        )
    result.release_tag = manifest.tag
    result.embedded_assets = manifest.embedded_assets()
    if result.embedded_assets:
        logger.info("Embedded assets in %s: %s", manifest.tag, ", ".join(result.embedded_assets))
    else:
        logger.warning("No embedded assets detected in the release metadata")

    steps.step("Detecting CPU/GPU capabilities")
    result.profile = probe(plat)

    steps.step("Choosing build")
    result.preference = resolve_preference(
        plat, result.profile,
        nvidia=settings.nvidia,
        portable=settings.portable,
        prompter=prompter,
    )

    steps.step("Preparing install directories")
    result.layout = install_layout(plat.os, home)
    variant = select_variant(plat, result.preference)
    if variant is None:
        raise UnsupportedPlatformError("Could not determine a release filename for this platform.")
    resolution = resolve_asset(manifest, variant, settings.app)
    result.resolution = resolution
    if resolution.asset is None:
        raise AssetNotFoundError(
            f"Could not find download URL for asset: {resolution.filename} "
            f"(release {manifest.tag})"
        )
    logger.info("Selected asset: %s", resolution.filename)

    if dry_run:
        return result

    with tempfile.TemporaryDirectory(prefix="remembrances-") as tmp:
        tmp_dir = Path(tmp)
        steps.step("Downloading & extracting release")
        archive = download_file(
            resolution.asset.download_url,
            tmp_dir / resolution.filename,
            timeout=settings.http_timeout,
        )
        src_dir = extracted_root(extract_archive(archive, tmp_dir / "release"))

        steps.step("Installing files")
        result.installed = install_release(src_dir, result.layout)

    if plat.os is OSFamily.LINUX and variant.is_cuda:
        _check_cuda_runtime(result, settings, home, settings.http_timeout)

    steps.step("Creating configuration")
    result.config_file = write_config(result.layout, settings.model_name)

    steps.step("Optional: downloading GGUF model")
    result.model_path = result.layout.models_dir / settings.model_name
    if _should_download_model(settings, prompter):
        result.model_downloaded = download_model(
            settings.model_url, result.model_path, timeout=settings.http_timeout,
        )
    else:
        result.model_downloaded = False
        logger.warning("Skipping GGUF model download")

    steps.step("Finalizing shell setup")
    lib_dir = None
    if result.remediation is not None and result.remediation.needs_ld_library_path:
        lib_dir = result.remediation.target_dir
    rc_files = shell_config_files(plat.os, home, os.environ.get("SHELL", ""))
    result.shell = setup_shell(rc_files, result.layout.bin_dir, lib_dir=lib_dir)

    return result
