"""
L4 Execution: Install layout and file copies.

Places the extracted release into per-OS user directories: the binary
and its shared libraries side by side in ``bin/``, sample configs in
the config directory.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from remembrances_installer.core.errors import BinaryNotFoundError
from remembrances_installer.core.models.platform import OSFamily
from remembrances_installer.core.services.install.data.constants import (
    BINARY_NAME,
    SAMPLE_CONFIGS,
)

logger = logging.getLogger(__name__)

_LIB_PATTERNS = ("*.so", "*.so.*", "*.dylib")


@dataclass(frozen=True)
class InstallLayout:
    """Where everything goes for one platform."""

    install_dir: Path
    config_dir: Path
    data_dir: Path

    @property
    def bin_dir(self) -> Path:
        return self.install_dir / "bin"

    @property
    def models_dir(self) -> Path:
        return self.install_dir / "models"

    @property
    def binary_path(self) -> Path:
        return self.bin_dir / BINARY_NAME

    def create(self) -> None:
        for d in (self.bin_dir, self.config_dir, self.data_dir, self.models_dir):
            d.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> dict[str, str]:
        return {
            "install_dir": str(self.install_dir),
            "bin_dir": str(self.bin_dir),
            "config_dir": str(self.config_dir),
            "data_dir": str(self.data_dir),
            "models_dir": str(self.models_dir),
        }


def install_layout(os_family: OSFamily, home: Path) -> InstallLayout:
    """Per-OS directories: Application Support on macOS, XDG-style on Linux."""
    if os_family is OSFamily.DARWIN:
        base = home / "Library" / "Application Support" / "remembrances"
        return InstallLayout(install_dir=base, config_dir=base, data_dir=base)
    share = home / ".local" / "share" / "remembrances"
    return InstallLayout(
        install_dir=share,
        config_dir=home / ".config" / "remembrances",
        data_dir=share,
    )


def find_binary(src_dir: Path) -> Path | None:
    """The application binary: top level first, then anywhere below."""
    direct = src_dir / BINARY_NAME
    if direct.is_file():
        return direct
    for candidate in sorted(src_dir.rglob(BINARY_NAME)):
        if candidate.is_file():
            return candidate
    return None


def _find_sample_config(base_dir: Path, src_dir: Path, name: str) -> Path | None:
    beside = base_dir / name
    if beside.is_file():
        return beside
    for candidate in sorted(src_dir.rglob(name)):
        if candidate.is_file():
            return candidate
    return None


def install_release(src_dir: Path, layout: InstallLayout) -> dict:
    """Copy the extracted release into ``layout``.

    Returns:
        ``{"binary": path, "libraries": [names], "sample_configs": [names]}``

    Raises:
        BinaryNotFoundError: If the extracted tree has no binary.
    """
    layout.create()

    binary = find_binary(src_dir)
    if binary is None:
        top = sorted(p.name for p in src_dir.iterdir()) if src_dir.is_dir() else []
        raise BinaryNotFoundError(
            f"Binary not found in release (extracted to {src_dir}; "
            f"top-level contents: {', '.join(top) or 'empty'})"
        )

    base_dir = binary.parent
    logger.info("Using release directory: %s", base_dir)

    shutil.copy2(binary, layout.binary_path)
    layout.binary_path.chmod(0o755)
    logger.info("Binary installed to %s", layout.binary_path)

    # The binary looks for its libraries in its own directory first
    libraries: list[str] = []
    for pattern in _LIB_PATTERNS:
        for lib in sorted(base_dir.glob(pattern)):
            if lib.is_file() and lib.name not in libraries:
                shutil.copy2(lib, layout.bin_dir / lib.name)
                libraries.append(lib.name)
    if libraries:
        logger.info("%d shared libraries installed to %s", len(libraries), layout.bin_dir)

    samples: list[str] = []
    for name in SAMPLE_CONFIGS:
        sample = _find_sample_config(base_dir, src_dir, name)
        if sample is not None:
            shutil.copy2(sample, layout.config_dir / name)
            samples.append(name)

    return {
        "binary": str(layout.binary_path),
        "libraries": libraries,
        "sample_configs": samples,
    }
