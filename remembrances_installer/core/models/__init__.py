"""
Domain models: Pydantic types for the installer.

All models are re-exported here for convenient access:

    from remembrances_installer.core.models import PlatformTuple, CapabilityProfile
"""

from remembrances_installer.core.models.capability import (
    CapabilityProfile,
    Override,
    VariantPreference,
)
from remembrances_installer.core.models.platform import Arch, OSFamily, PlatformTuple
from remembrances_installer.core.models.release import (
    AssetDescriptor,
    AssetResolution,
    ReleaseManifest,
    ReleaseVariant,
)
from remembrances_installer.core.models.settings import InstallerSettings
from remembrances_installer.core.models.validation import (
    ValidationOutcome,
    ValidationStatus,
)

__all__ = [
    # platform.py
    "Arch",
    # release.py
    "AssetDescriptor",
    "AssetResolution",
    # capability.py
    "CapabilityProfile",
    # settings.py
    "InstallerSettings",
    "OSFamily",
    "Override",
    "PlatformTuple",
    "ReleaseManifest",
    "ReleaseVariant",
    # validation.py
    "ValidationOutcome",
    "ValidationStatus",
    "VariantPreference",
]
