"""
L1 Domain: Release asset selection (pure).

Maps (platform, variant preference) to exactly one ReleaseVariant, and
resolves that variant's filename against a release manifest with a
single defined fallback. No I/O.
"""

from __future__ import annotations

import logging

from remembrances_installer.core.models.capability import (
    CapabilityProfile,
    VariantPreference,
)
from remembrances_installer.core.models.platform import PlatformTuple
from remembrances_installer.core.models.release import (
    AssetResolution,
    ReleaseManifest,
    ReleaseVariant,
)
from remembrances_installer.core.services.install.data.constants import APP_NAME

logger = logging.getLogger(__name__)

# The only substitution allowed when the primary asset is missing
_FALLBACKS: dict[ReleaseVariant, ReleaseVariant] = {
    ReleaseVariant.LINUX_CPU_EMBEDDED: ReleaseVariant.LINUX_CPU,
}


def default_preference(plat: PlatformTuple, profile: CapabilityProfile) -> VariantPreference:
    """Computed defaults before any override or wizard answer.

    AVX-512 CPUs get the narrower, faster non-portable build; everything
    else gets the portable one.
    """
    if not plat.is_linux_amd64:
        return VariantPreference(want_nvidia=False, want_portable=False)
    return VariantPreference(
        want_nvidia=profile.has_nvidia_gpu,
        want_portable=not profile.has_avx512,
    )


def select_variant(plat: PlatformTuple, pref: VariantPreference) -> ReleaseVariant | None:
    """Total mapping from (platform, preference) to a release variant.

    Returns None for platforms with no mapping.
    """
    if plat.is_darwin_aarch64:
        return ReleaseVariant.DARWIN_EMBEDDED
    if plat.is_linux_amd64:
        if not pref.want_nvidia:
            return ReleaseVariant.LINUX_CPU_EMBEDDED
        if pref.want_portable:
            return ReleaseVariant.LINUX_CUDA_PORTABLE_EMBEDDED
        return ReleaseVariant.LINUX_CUDA_EMBEDDED
    return None


def select_filename(
    plat: PlatformTuple,
    pref: VariantPreference,
    app: str = APP_NAME,
) -> str | None:
    variant = select_variant(plat, pref)
    return variant.filename(app) if variant else None


def resolve_asset(
    manifest: ReleaseManifest,
    variant: ReleaseVariant,
    app: str = APP_NAME,
) -> AssetResolution:
    """Find the asset for ``variant``, falling back at most once.

    Returns:
        AssetResolution; ``asset`` is None when neither the primary nor
        the fallback filename is in the manifest.
    """
    requested = variant.filename(app)
    asset = manifest.find(requested)
    if asset is not None:
        return AssetResolution(requested_filename=requested, filename=requested, asset=asset)

    fallback = _FALLBACKS.get(variant)
    if fallback is None:
        logger.debug("No asset named %s and no fallback defined", requested)
        return AssetResolution(requested_filename=requested, filename=requested)

    fallback_name = fallback.filename(app)
    logger.warning(
        "Asset %s not found in release %s; falling back to %s",
        requested, manifest.tag, fallback_name,
    )
    return AssetResolution(
        requested_filename=requested,
        filename=fallback_name,
        asset=manifest.find(fallback_name),
        fell_back=True,
    )
