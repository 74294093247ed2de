"""
Terminal prompts for the install wizard.

Interactive only when stdin is a TTY (``curl | bash``-style piping
gets the defaults). Non-interactive answers are logged so the user can
see which default was taken.
"""

from __future__ import annotations

import logging
import sys

import click

logger = logging.getLogger(__name__)


class TerminalPrompter:
    """Yes/no questions via ``click.confirm``, defaults without a TTY."""

    def __init__(self, interactive: bool | None = None, assume_defaults: bool = False):
        if interactive is None:
            interactive = sys.stdin.isatty()
        self._interactive = interactive and not assume_defaults

    @property
    def interactive(self) -> bool:
        return self._interactive

    def ask_yes_no(self, question: str, default: bool) -> bool:
        if not self._interactive:
            logger.warning(
                "Non-interactive mode: using default (%s) for: %s",
                "y" if default else "n", question,
            )
            return default
        return click.confirm(question, default=default)
