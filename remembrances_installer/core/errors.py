"""
Install errors: fatal conditions that abort the run.

Probes never raise and selection/validation return closed outcomes, so
these are only raised at the points where the run cannot continue.
The CLI catches ``InstallError`` and exits non-zero with the message.
"""

from __future__ import annotations


class InstallError(Exception):
    """Base for every fatal install condition."""


class UnsupportedPlatformError(InstallError):
    """Unsupported OS, architecture, or OS/architecture combination."""


class AssetNotFoundError(InstallError):
    """No downloadable asset for the selected (or fallback) filename."""


class DownloadError(InstallError):
    """Release metadata or a file could not be fetched."""


class ArchiveError(InstallError):
    """A downloaded archive could not be extracted."""


class BinaryNotFoundError(InstallError):
    """The extracted release does not contain the application binary."""


class RemediationError(InstallError):
    """The CUDA runtime bundle could not be installed.

    Only fatal for the remediation step: the application binary that
    was already installed stays in place.
    """
