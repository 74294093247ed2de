"""
L1 Domain: Download helpers (pure).

Size formatting, a rough download-time hint, and progress arithmetic
for the downloader's log lines. No I/O.
"""

from __future__ import annotations

# Reference connection used for the "this may take a while" hint
_REFERENCE_MBPS = 50


def fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


def estimate_download_time(size_bytes: int, mbps: int = _REFERENCE_MBPS) -> str:
    """Estimated wall time for ``size_bytes`` at ``mbps``."""
    secs = int(size_bytes / (mbps * 1024 * 1024 / 8))
    if secs < 60:
        return f"{secs}s"
    if secs < 3600:
        return f"{secs // 60}m {secs % 60}s"
    return f"{secs // 3600}h {(secs % 3600) // 60}m"


def progress_percent(done: int, total: int) -> int | None:
    """Whole percent complete, or None when the total is unknown."""
    if total <= 0:
        return None
    return min(100, (done * 100) // total)
