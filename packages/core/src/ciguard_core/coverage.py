"""Diff-coverage threshold enforcement with a codeowner-approved override.

``evaluate`` walks a fixed sequence of checks and stops at the first one that
decides the outcome:

    invalid report      → fail
    coverage tool crash → fail (never bypassable)
    no executable lines → pass (doc/config-only PR)
    at/above threshold  → pass
    below, no label     → fail
    below, with label   → pass only with codeowner approval

Override outcomes also emit telemetry events; sending them is the caller's job.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real

from ciguard_core.codeowners import DEFAULT_CODEOWNERS_PATH, FileReader, ReviewFetcher, has_approval, read_text
from ciguard_core.gh.event import PullRequestContext

logger = logging.getLogger(__name__)

DEFAULT_REPORT_PATH = "coverage/diff-cover.json"
DEFAULT_OVERRIDE_LABEL = "coverage-override"


@dataclass
class CoverageReport:
    percent: float = 0.0
    total_lines: int = 0
    parse_error: bool = False
    crash_fallback: bool = False


class EventKind(str, Enum):
    OVERRIDE_APPLIED = "coverage_override_applied"
    OVERRIDE_WITHOUT_APPROVAL = "coverage_override_without_approval"


@dataclass
class CoverageEvent:
    kind: EventKind
    actual_coverage: float
    threshold: float
    has_approval: bool

    def to_dict(self) -> dict:
        return {
            "event": self.kind.value,
            "actual_coverage": self.actual_coverage,
            "threshold": self.threshold,
            "has_approval": self.has_approval,
        }


@dataclass
class GateDecision:
    should_fail: bool
    coverage_percent: float | None
    reason: str
    override_applied: bool = False
    telemetry_events: list[CoverageEvent] = field(default_factory=list)


def _is_number(value) -> bool:
    # bool is an int subclass, but `true` in the report is not a line count;
    # json.loads also yields inf and nan for the non-standard Infinity and NaN tokens
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def parse_coverage_report(data) -> CoverageReport:
    """Validate a decoded diff-cover JSON document.

    ``total_num_lines`` is always required. ``total_percent_covered`` may only
    be omitted when there are no executable lines to cover.
    """
    if not isinstance(data, dict):
        return CoverageReport(parse_error=True)

    total_lines = data.get("total_num_lines")
    percent = data.get("total_percent_covered")
    if not _is_number(total_lines):
        return CoverageReport(parse_error=True)
    if not _is_number(percent):
        if total_lines != 0:
            return CoverageReport(parse_error=True)
        percent = 100.0

    return CoverageReport(
        percent=float(percent),
        total_lines=int(total_lines),
        crash_fallback=data.get("crash_fallback") is True,
    )


def load_coverage_report(report_path: str = DEFAULT_REPORT_PATH, reader: FileReader | None = None) -> CoverageReport:
    """Read the diff-cover JSON report; any read or decode failure is a parse error."""
    reader = reader or read_text
    try:
        data = json.loads(reader(report_path))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Could not load coverage report %s: %s", report_path, e)
        return CoverageReport(parse_error=True)
    return parse_coverage_report(data)


def _format_percent(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else repr(value)


def evaluate(
    report: CoverageReport,
    pr_context: PullRequestContext | None,
    review_fetcher: ReviewFetcher,
    labels: list[str],
    threshold: float,
    codeowners_path: str = DEFAULT_CODEOWNERS_PATH,
    override_label: str = DEFAULT_OVERRIDE_LABEL,
    reader: FileReader | None = None,
) -> GateDecision:
    if report.parse_error:
        return GateDecision(
            should_fail=True,
            coverage_percent=None,
            reason="Coverage report missing or invalid JSON",
        )

    # Written by the workflow's fallback when diff-cover itself exits non-zero
    if report.crash_fallback:
        return GateDecision(
            should_fail=True,
            coverage_percent=None,
            reason="diff-cover exited non-zero (LCOV parse error or crash); skipping the coverage check is not permitted",
        )

    if report.total_lines == 0:
        return GateDecision(
            should_fail=False,
            coverage_percent=100.0,
            reason="No executable lines to cover (doc/config-only PR)",
        )

    percent = report.percent
    shown, target = _format_percent(percent), _format_percent(threshold)

    if percent >= threshold:
        return GateDecision(
            should_fail=False,
            coverage_percent=percent,
            reason=f"Coverage {shown}% meets {target}% threshold",
        )

    if override_label not in labels:
        return GateDecision(
            should_fail=True,
            coverage_percent=percent,
            reason=f"Coverage {shown}% below {target}% threshold",
        )

    if pr_context is None:
        # Reviews only exist on pull requests
        approved = False
    else:
        approved = has_approval(review_fetcher, codeowners_path, pr_context.author, reader)

    if not approved:
        logger.warning("%s label present but no CODEOWNERS approval found", override_label)
        return GateDecision(
            should_fail=True,
            coverage_percent=percent,
            reason=f"{override_label} label requires CODEOWNERS approval",
            telemetry_events=[CoverageEvent(EventKind.OVERRIDE_WITHOUT_APPROVAL, percent, threshold, False)],
        )

    return GateDecision(
        should_fail=False,
        coverage_percent=percent,
        reason=f"Coverage {shown}% below {target}% (override applied)",
        override_applied=True,
        telemetry_events=[CoverageEvent(EventKind.OVERRIDE_APPLIED, percent, threshold, True)],
    )
