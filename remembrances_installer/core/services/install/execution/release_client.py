"""
L4 Execution: GitHub release metadata.

Fetches the release JSON for ``latest`` or a specific tag and turns it
into a ReleaseManifest.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request

from remembrances_installer import __version__
from remembrances_installer.core.errors import DownloadError
from remembrances_installer.core.models.release import ReleaseManifest
from remembrances_installer.core.services.install.data.constants import GITHUB_API

logger = logging.getLogger(__name__)

USER_AGENT = f"remembrances-installer/{__version__}"


def release_api_url(repo: str, version: str = "latest") -> str:
    """GitHub API URL for release metadata (``latest`` or a tag)."""
    if not version or version == "latest":
        return f"{GITHUB_API}/repos/{repo}/releases/latest"
    return f"{GITHUB_API}/repos/{repo}/releases/tags/{version}"


def fetch_release_manifest(
    repo: str,
    version: str = "latest",
    *,
    timeout: int = 60,
) -> ReleaseManifest:
    """Fetch and parse release metadata.

    Raises:
        DownloadError: Network/HTTP failure, invalid JSON, or no tag.
    """
    api_url = release_api_url(repo, version)
    logger.info("Fetching release metadata: %s", api_url)
    req = urllib.request.Request(
        api_url,
        headers={
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        },
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            data = json.loads(resp.read())
    except urllib.error.HTTPError as exc:
        raise DownloadError(
            f"Failed to fetch release metadata from GitHub ({exc.code}): {api_url}"
        ) from exc
    except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
        raise DownloadError(f"Failed to fetch release metadata from GitHub: {exc}") from exc
    except ValueError as exc:
        raise DownloadError(f"Invalid release metadata from {api_url}: {exc}") from exc

    if not isinstance(data, dict):
        raise DownloadError(f"Unexpected release metadata from {api_url}")

    manifest = ReleaseManifest.from_github(data)
    if not manifest.tag:
        raise DownloadError("Could not determine release tag from GitHub API response.")

    logger.info("Release %s: %d assets", manifest.tag, len(manifest.assets))
    return manifest
