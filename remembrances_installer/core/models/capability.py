"""
Capability models: what the host can run, and what the user wants.

``CapabilityProfile`` is probed once and never mutated.
``VariantPreference`` starts from computed defaults, may be changed by
overrides or the wizard, and is frozen before asset selection.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class CapabilityProfile(BaseModel):
    """Hardware capabilities relevant to binary variant selection."""

    model_config = ConfigDict(frozen=True)

    has_nvidia_gpu: bool = False
    cuda_major_version: int | None = None
    has_avx2: bool = False
    has_avx512: bool = False

    @classmethod
    def unknown(cls) -> CapabilityProfile:
        """Profile for platforms that are not probed."""
        return cls()

    def to_dict(self) -> dict:
        return self.model_dump()


class VariantPreference(BaseModel):
    """Which build flavour to install."""

    model_config = ConfigDict(frozen=True)

    want_nvidia: bool = False
    want_portable: bool = False


class Override(str, Enum):
    """Three-valued user override: unset, force yes, force no."""

    UNSET = "unset"
    YES = "yes"
    NO = "no"

    @classmethod
    def parse(cls, value: object) -> Override:
        """Parse an env/YAML/CLI value into an override.

        Accepts booleans, ``None`` and the strings yes/no/y/n/true/false/1/0
        (case-insensitive). Empty means unset.

        Raises:
            ValueError: For anything else.
        """
        if isinstance(value, Override):
            return value
        if value is None:
            return cls.UNSET
        if isinstance(value, bool):
            return cls.YES if value else cls.NO
        text = str(value).strip().lower()
        if text in ("", "unset"):
            return cls.UNSET
        if text in ("yes", "y", "true", "1", "on"):
            return cls.YES
        if text in ("no", "n", "false", "0", "off"):
            return cls.NO
        raise ValueError(f"expected yes/no, got {value!r}")

    def apply(self, current: bool) -> bool:
        """Return the overridden value, or ``current`` when unset."""
        if self is Override.YES:
            return True
        if self is Override.NO:
            return False
        return current

    @property
    def is_set(self) -> bool:
        return self is not Override.UNSET
