"""
L4 Execution: File download.

Streams a URL to disk. Timeouts are the only resilience knob; no
retries.
"""

from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.request
from pathlib import Path

from remembrances_installer.core.errors import DownloadError
from remembrances_installer.core.services.install.domain.download_helpers import (
    estimate_download_time,
    fmt_size,
    progress_percent,
)
from remembrances_installer.core.services.install.execution.release_client import (
    USER_AGENT,
)

logger = logging.getLogger(__name__)

_CHUNK = 1024 * 256


def download_file(url: str, dest: Path, *, timeout: int = 60) -> Path:
    """Download ``url`` to ``dest``.

    A partially written file is removed on failure, including a body
    shorter than the advertised ``Content-Length``.

    Raises:
        DownloadError: On any network or write error.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    logger.info("Downloading %s", url)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp, open(dest, "wb") as out:
            total = int(resp.headers.get("Content-Length") or 0)
            if total:
                logger.info(
                    "Size %s (about %s at 50 Mbps)",
                    fmt_size(total), estimate_download_time(total),
                )
            done = 0
            last_pct = -1
            for chunk in iter(lambda: resp.read(_CHUNK), b""):
                out.write(chunk)
                done += len(chunk)
                pct = progress_percent(done, total)
                if pct is not None and pct // 10 != last_pct // 10:
                    logger.debug("  %d%% (%s)", pct, fmt_size(done))
                    last_pct = pct
    except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Download failed for {url}: {exc}") from exc

    if total and done != total:
        dest.unlink(missing_ok=True)
        raise DownloadError(
            f"Incomplete download for {url}: got {done} of {total} bytes"
        )

    logger.info("Downloaded %s to %s", fmt_size(done), dest)
    return dest


def download_model(url: str, dest: Path, *, timeout: int = 60) -> bool:
    """Fetch the GGUF embedding model unless it is already present.

    Failure is not fatal: the user can fetch the model by hand.

    Returns:
        True if the model is present afterwards.
    """
    if dest.is_file():
        logger.warning("GGUF model already exists at %s", dest)
        return True
    try:
        download_file(url, dest, timeout=timeout)
    except DownloadError as exc:
        logger.error("Failed to download GGUF model: %s", exc)
        logger.warning("You can download it manually from: %s", url)
        logger.warning("And save it to: %s", dest)
        return False
    return True
