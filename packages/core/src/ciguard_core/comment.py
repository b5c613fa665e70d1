"""Terraform plan PR comments, located across runs by a marker string.

Each Terraform module posts at most one comment per PR. The comment body
starts with a caller-supplied marker (usually an HTML comment such as
``<!-- tf-plan:workers -->``); later runs find the comment by that marker and
update it in place, or delete it once the plan has no changes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from ciguard_core.plan import classify

logger = logging.getLogger(__name__)

MAX_PLAN_CHARS = 60_000
PLAN_READ_ERROR = "Error reading plan output. Check workflow logs."

# terraform plan -detailed-exitcode: 0 = no changes, 1 = error, 2 = changes
NO_CHANGES_EXITCODE = "0"


class CommentStore(ABC):
    """Issue comments on a single pull request.

    Comment objects only need ``id`` and ``body`` attributes, which PyGithub's
    ``IssueComment`` provides.
    """

    @abstractmethod
    def list_comments(self) -> list:
        """Return every comment on the PR, across all pages."""

    @abstractmethod
    def create(self, body: str) -> None:
        """Post a new comment."""

    @abstractmethod
    def update(self, comment, body: str) -> None:
        """Replace the body of an existing comment."""

    @abstractmethod
    def delete(self, comment) -> None:
        """Delete an existing comment."""


def read_plan_output(plan_path: str) -> str:
    try:
        return Path(plan_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read plan output %s: %s", plan_path, e)
        return PLAN_READ_ERROR


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_comment_body(
    marker: str,
    module_name: str,
    plan: str,
    collapse: bool,
    actor: str,
    timestamp: str | None = None,
) -> str:
    timestamp = timestamp or _timestamp()
    plan = plan[:MAX_PLAN_CHARS]
    header = f"{marker}\n#### Terraform Plan ({module_name})\n\n"
    footer = f"*Updated: {timestamp} by @{actor}*"
    if collapse:
        return (
            header
            + "✅ Worker build successful. Code changes will deploy on merge.\n\n"
            + f"<details><summary>Plan details</summary>\n\n```\n{plan}\n```\n</details>\n\n"
            + footer
        )
    return header + f"```\n{plan}\n```\n\n" + footer


def _matching(comments: list, marker: str) -> list:
    return [c for c in comments if marker in (c.body or "")]


def publish_plan_comment(
    store: CommentStore,
    pr_number: int | None,
    marker: str,
    exitcode: str,
    plan: str,
    enable_collapse: bool,
    actor: str,
    module_name: str,
    timestamp: str | None = None,
) -> str:
    """Create, update or delete the plan comment for one Terraform module.

    Returns the action taken: ``"skipped"``, ``"deleted"``, ``"updated"`` or
    ``"created"``.
    """
    if not pr_number:
        logger.info("Skipping PR comment: not a pull_request event")
        return "skipped"

    # An empty marker would match every comment on the PR
    if not marker or not marker.strip():
        raise ValueError("marker is required and cannot be empty")

    if str(exitcode) == NO_CHANGES_EXITCODE:
        stale = _matching(store.list_comments(), marker)
        for comment in stale:
            store.delete(comment)
        logger.info("Plan has no changes; deleted %d existing comment(s) for %s", len(stale), module_name)
        return "deleted"

    collapse = classify(plan).should_collapse if enable_collapse else False
    body = build_comment_body(marker, module_name, plan, collapse, actor, timestamp)

    existing = _matching(store.list_comments(), marker)
    if existing:
        store.update(existing[0], body)
        logger.info("Updated plan comment for %s (collapsed=%s)", module_name, collapse)
        return "updated"

    store.create(body)
    logger.info("Created plan comment for %s (collapsed=%s)", module_name, collapse)
    return "created"
