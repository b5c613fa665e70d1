"""GitHub Actions workflow-command helpers."""

from __future__ import annotations

import os


def in_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def _format_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def write_outputs(outputs: dict, output_path: str | None = None) -> bool:
    """Append ``key=value`` step outputs to $GITHUB_OUTPUT.

    Returns False (and writes nothing) outside Actions, where the variable is unset.
    """
    output_path = output_path or os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return False
    with open(output_path, "a", encoding="utf-8") as f:
        for key, value in outputs.items():
            f.write(f"{key}={_format_value(value)}\n")
    return True
