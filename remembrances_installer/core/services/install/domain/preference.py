"""
L1 Domain: Variant preference resolution.

Precedence per field: explicit override  >  wizard answer  >  computed
default. The wizard only runs on linux/amd64 with an interactive
terminal, and never asks about a field that an override already fixed.
"""

from __future__ import annotations

import logging
from typing import Protocol

from remembrances_installer.core.models.capability import (
    CapabilityProfile,
    Override,
    VariantPreference,
)
from remembrances_installer.core.models.platform import PlatformTuple
from remembrances_installer.core.services.install.domain.asset_selection import (
    default_preference,
)

logger = logging.getLogger(__name__)

NVIDIA_QUESTION = "Install NVIDIA/CUDA build?"
PORTABLE_QUESTION = "Use portable build (recommended unless your CPU supports AVX-512)?"


class Prompter(Protocol):
    """Yes/no question source. Non-interactive prompters return the default."""

    @property
    def interactive(self) -> bool: ...

    def ask_yes_no(self, question: str, default: bool) -> bool: ...


def resolve_preference(
    plat: PlatformTuple,
    profile: CapabilityProfile,
    *,
    nvidia: Override = Override.UNSET,
    portable: Override = Override.UNSET,
    prompter: Prompter | None = None,
) -> VariantPreference:
    """Finalize the variant preference for this run.

    Args:
        plat: Supported platform tuple.
        profile: Probed capabilities.
        nvidia: Override for the NVIDIA/CPU choice.
        portable: Override for the portable/non-portable choice.
        prompter: Wizard question source; None means non-interactive.

    Returns:
        The frozen VariantPreference handed to asset selection.
    """
    default = default_preference(plat, profile)
    if not plat.is_linux_amd64:
        if nvidia.is_set or portable.is_set:
            logger.info("Build overrides ignored on %s", plat.label())
        return default

    want_nvidia = nvidia.apply(default.want_nvidia)
    want_portable = portable.apply(default.want_portable)

    wizard = prompter is not None and prompter.interactive
    if wizard and not nvidia.is_set:
        if profile.has_nvidia_gpu:
            want_nvidia = prompter.ask_yes_no(NVIDIA_QUESTION, True)  # type: ignore[union-attr]
        else:
            want_nvidia = False

    if wizard and want_nvidia and not portable.is_set:
        want_portable = prompter.ask_yes_no(PORTABLE_QUESTION, want_portable)  # type: ignore[union-attr]

    pref = VariantPreference(want_nvidia=want_nvidia, want_portable=want_portable)
    logger.info(
        "Build preference: nvidia=%s portable=%s (default nvidia=%s portable=%s)",
        pref.want_nvidia, pref.want_portable,
        default.want_nvidia, default.want_portable,
    )
    return pref
