"""Telemetry data models.

Decoupled from ciguard_core: sinks accept plain event dicts, and the CLI
converts the core's typed events with ``to_dict()`` before sending.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class RunMetadata:
    """Identifies the workflow run an event came from."""

    workflow: str | None = None
    run_id: str | None = None
    sha: str | None = None
    ref: str | None = None
    pr_number: int | None = None

    @classmethod
    def from_env(cls, pr_number: int | None = None) -> RunMetadata:
        """Read run metadata from the GITHUB_* variables Actions injects."""
        return cls(
            workflow=os.environ.get("GITHUB_WORKFLOW"),
            run_id=os.environ.get("GITHUB_RUN_ID"),
            sha=os.environ.get("GITHUB_SHA"),
            ref=os.environ.get("GITHUB_REF"),
            pr_number=pr_number,
        )


def utc_timestamp() -> str:
    """Current UTC time as millisecond ISO-8601 with a Z suffix, as in the plan comment footer."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_payload(event: dict, metadata: RunMetadata, timestamp: str | None = None) -> list[dict]:
    """Wrap one event in the single-element array the ingest endpoint expects."""
    return [
        {
            **event,
            "timestamp": timestamp or utc_timestamp(),
            "workflow": metadata.workflow,
            "run_id": metadata.run_id,
            "sha": metadata.sha,
            "ref": metadata.ref,
            "pr_number": metadata.pr_number,
        }
    ]
