"""
L4 Execution: Shell startup file setup.

Appends PATH (and, after CUDA remediation, LD_LIBRARY_PATH) exports to
the user's shell rc files. Idempotent: a file that already carries the
line is left alone.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from remembrances_installer.core.models.platform import OSFamily
from remembrances_installer.core.services.install.data.constants import SHELL_MARKER

logger = logging.getLogger(__name__)

_ZSH_SHELLS = ("/bin/zsh", "/usr/bin/zsh")


def shell_config_line(
    *,
    path_entry: str | None = None,
    lib_entry: str | None = None,
) -> str:
    """POSIX export line that appends to PATH or prepends to LD_LIBRARY_PATH."""
    if path_entry:
        return f'export PATH="$PATH:{path_entry}"'
    if lib_entry:
        return f'export LD_LIBRARY_PATH="{lib_entry}:${{LD_LIBRARY_PATH:-}}"'
    return ""


def shell_config_files(os_family: OSFamily, home: Path, shell: str = "") -> list[Path]:
    """Which rc files to touch.

    ``.bashrc`` unless the user only has a ``.zshrc``; ``.zshrc`` when
    present or when zsh is the login shell; ``.bash_profile`` on macOS
    when present.
    """
    bashrc = home / ".bashrc"
    zshrc = home / ".zshrc"
    files: list[Path] = []
    if bashrc.exists() or not zshrc.exists():
        files.append(bashrc)
    if zshrc.exists() or shell in _ZSH_SHELLS:
        files.append(zshrc)
    bash_profile = home / ".bash_profile"
    if os_family is OSFamily.DARWIN and bash_profile.exists():
        files.append(bash_profile)
    return files


def setup_shell(
    files: list[Path],
    bin_dir: Path,
    *,
    lib_dir: Path | None = None,
) -> dict[str, list[str]]:
    """Append the exports to each rc file.

    Args:
        files: rc files from ``shell_config_files``.
        bin_dir: Directory holding the installed binary.
        lib_dir: When set, also make it visible to the dynamic loader.

    Returns:
        ``{"path_added": [...], "ld_library_path_added": [...], "unchanged": [...]}``
    """
    path_line = shell_config_line(path_entry=str(bin_dir))
    ld_line = shell_config_line(lib_entry=str(lib_dir)) if lib_dir else ""
    ld_pattern = re.compile(rf"LD_LIBRARY_PATH=.*{re.escape(str(lib_dir))}") if lib_dir else None

    result: dict[str, list[str]] = {
        "path_added": [],
        "ld_library_path_added": [],
        "unchanged": [],
    }
    for rc in files:
        rc.touch(exist_ok=True)
        content = rc.read_text(encoding="utf-8", errors="replace")
        additions: list[str] = []

        if str(bin_dir) not in content:
            additions += ["", SHELL_MARKER, path_line]
            result["path_added"].append(str(rc))
            logger.info("Added PATH to %s", rc)
        else:
            logger.warning("PATH already configured in %s", rc)

        if ld_pattern is not None:
            if not ld_pattern.search(content):
                additions.append(ld_line)
                result["ld_library_path_added"].append(str(rc))
                logger.info("Added LD_LIBRARY_PATH to %s", rc)
            else:
                logger.warning("LD_LIBRARY_PATH already configured in %s", rc)

        if not additions:
            result["unchanged"].append(str(rc))
            continue
        with rc.open("a", encoding="utf-8") as f:
            if content and not content.endswith("\n"):
                f.write("\n")
            f.write("\n".join(additions) + "\n")
    return result
