from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class PullRequestContext:
    """The slice of a ``pull_request`` event payload the CI helpers act on."""

    number: int
    author: str | None = None
    labels: list[str] = field(default_factory=list)


def load_event(event_path: str | None = None) -> dict:
    """Load the GitHub Actions event payload, or {} when unavailable."""
    event_path = event_path or os.environ.get("GITHUB_EVENT_PATH")
    if not event_path:
        return {}
    try:
        return json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not load GitHub event payload from %s: %s", event_path, e)
        return {}


def pull_request_context(event: dict) -> PullRequestContext | None:
    """Extract the PR context from an event payload; None for non-PR triggers."""
    if not isinstance(event, dict):
        return None
    pr = event.get("pull_request") or {}
    if not isinstance(pr, dict):
        return None
    number = pr.get("number")
    if not number:
        return None
    user = pr.get("user") or {}
    labels = [label.get("name", "") for label in pr.get("labels") or [] if isinstance(label, dict)]
    return PullRequestContext(number=number, author=user.get("login"), labels=labels)
