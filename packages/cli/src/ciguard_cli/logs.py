"""Logging setup for the CLI.

Inside GitHub Actions, warnings and errors from the library loggers become
workflow annotations (``::warning::...``) so they surface on the run summary.
Everywhere else they go through rich.
"""

from __future__ import annotations

import logging
import sys

from rich.logging import RichHandler

from ciguard_core.gh.actions import in_github_actions

_ANNOTATION_LEVELS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class AnnotationFormatter(logging.Formatter):
    """Render records as GitHub workflow commands; INFO stays plain text."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _ANNOTATION_LEVELS.get(record.levelno)
        if command is None:
            return message
        # Workflow commands end at the first newline
        return f"::{command}::" + message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    if in_github_actions():
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(AnnotationFormatter("%(message)s"))
    else:
        handler = RichHandler(show_path=False)
    # No-op when the root logger is already configured (embedding, test runners)
    logging.basicConfig(level=level, handlers=[handler])
