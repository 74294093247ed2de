"""
Validation models: can the dynamic loader satisfy the CUDA libraries?
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ValidationStatus(str, Enum):
    RESOLVABLE = "resolvable"
    MISSING_LIBS = "missing_libs"
    INDETERMINATE = "indeterminate"


class ValidationOutcome(BaseModel):
    """Closed result of a runtime dependency check.

    ``missing`` is only populated for ``MISSING_LIBS``.
    ``strategy`` names the check that produced the answer.
    """

    model_config = ConfigDict(frozen=True)

    status: ValidationStatus
    missing: tuple[str, ...] = ()
    strategy: str = ""

    @classmethod
    def resolvable(cls, strategy: str = "") -> ValidationOutcome:
        return cls(status=ValidationStatus.RESOLVABLE, strategy=strategy)

    @classmethod
    def missing_libs(cls, missing: list[str] | tuple[str, ...], strategy: str = "") -> ValidationOutcome:
        return cls(
            status=ValidationStatus.MISSING_LIBS,
            missing=tuple(missing),
            strategy=strategy,
        )

    @classmethod
    def indeterminate(cls, strategy: str = "") -> ValidationOutcome:
        return cls(status=ValidationStatus.INDETERMINATE, strategy=strategy)

    @property
    def is_definite(self) -> bool:
        return self.status is not ValidationStatus.INDETERMINATE

    @property
    def is_resolvable(self) -> bool:
        return self.status is ValidationStatus.RESOLVABLE

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "missing": list(self.missing),
            "strategy": self.strategy,
        }
