"""
Logging configuration: central setup for the installer CLI.

Called once at startup by main.py. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config, so each
detected capability and each selection decision shows up as a
diagnostic line on stderr.

Levels are resolved in precedence order:
    --debug  >  --verbose  >  --quiet  >  REMEMBRANCES_LOG_LEVEL  >  WARNING

Optional file output via REMEMBRANCES_LOG_FILE / REMEMBRANCES_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

# ── Format strings ──────────────────────────────────────────────

# WARNING level: the message only, prefixed by a severity marker
_FMT_MINIMAL = "%(message)s"

# INFO level: timestamped with module context
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output: always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# urllib3 is only pulled in transitively, but stays quiet if present
_NOISY_LOGGERS = ("urllib3", "charset_normalizer")

ENV_LEVEL = "REMEMBRANCES_LOG_LEVEL"
ENV_FILE = "REMEMBRANCES_LOG_FILE"
ENV_FILE_LEVEL = "REMEMBRANCES_LOG_FILE_LEVEL"


class _MarkerFormatter(logging.Formatter):
    """Prefix warnings and errors with the installer's status markers."""

    _MARKERS = {logging.WARNING: "! ", logging.ERROR: "✗ ", logging.CRITICAL: "✗ "}

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        return self._MARKERS.get(record.levelno, "") + text


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    source = os.environ if env is None else env
    return source.get(ENV_LEVEL, "WARNING") or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
        quiet_third_party: Keep noisy third-party loggers at WARNING
            unless we're at DEBUG level.
    """
    numeric_level = _parse_level(level)

    # ── Console handler (stderr) ────────────────────────────────
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    if numeric_level <= logging.DEBUG:
        console.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG))
    elif numeric_level <= logging.INFO:
        console.setFormatter(logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_VERBOSE))
    else:
        console.setFormatter(_MarkerFormatter(_FMT_MINIMAL))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    if quiet_third_party and numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
