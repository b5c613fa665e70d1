"""Terraform plan classification.

Decides whether a plan only touches worker code (the ``content`` and
``content_sha256`` attributes of an in-place update) so the PR comment can
collapse it behind a ``<details>`` block.

The plan text is first split into tagged lines by ``tokenize``; ``classify``
then derives its verdict from those tags alone. This is a heuristic over
Terraform's human-readable output, not a plan parser. Anything it does not
recognise falls through to ``OTHER``, and an unrecognised plan is never
collapsed: showing a code-only plan in full is harmless, hiding a real
infrastructure change is not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

COMPUTED_PLACEHOLDER = "(known after apply)"

# Attributes whose in-place change means "the worker script was rebuilt".
CODE_ATTRIBUTES = frozenset({"content_sha256", "content"})

RESOURCE_CHANGE_MARKERS = ("will be created", "will be destroyed", "must be replaced")

_SUMMARY_RE = re.compile(r"Plan: (\d+) to add, (\d+) to change, (\d+) to destroy")
_NAME_RE = re.compile(r"\w+")
_ARROW = "->"


class LineKind(str, Enum):
    ADDITION = "addition"
    DELETION = "deletion"
    CHANGE = "change"
    SUMMARY = "summary"
    OTHER = "other"


@dataclass
class PlanLine:
    """A single tokenized plan line.

    ``significant`` is the matcher's verdict: a real attribute addition,
    deletion or value change, as opposed to a computed placeholder or a
    paired before/after line.
    """

    kind: LineKind
    raw: str
    name: str | None = None
    value: str | None = None
    new_value: str | None = None
    significant: bool = False
    counts: tuple[int, int, int] | None = None  # (add, change, destroy) for SUMMARY


@dataclass
class ClassificationResult:
    should_collapse: bool
    has_only_updates: bool
    changed_attrs: list[str] = field(default_factory=list)
    has_real_additions: bool = False
    has_real_deletions: bool = False
    has_resource_changes: bool = False


def _split_assignment(body: str) -> tuple[str, str] | None:
    """Split ``name = value`` into its parts; None unless name is a bare identifier and value is non-empty."""
    name, sep, value = body.partition("=")
    if not sep:
        return None
    name = name.strip()
    value = value.strip()
    if not _NAME_RE.fullmatch(name) or not value:
        return None
    return name, value


def _is_computed(value: str) -> bool:
    return value.startswith(COMPUTED_PLACEHOLDER)


def _match_summary(line: str) -> PlanLine | None:
    match = _SUMMARY_RE.search(line)
    if not match:
        return None
    add, change, destroy = (int(g) for g in match.groups())
    return PlanLine(kind=LineKind.SUMMARY, raw=line, counts=(add, change, destroy))


def _match_change(line: str, stripped: str) -> PlanLine | None:
    if not stripped.startswith("~") or not stripped[1:2].isspace():
        return None
    parts = _split_assignment(stripped[1:])
    if parts is None:
        return None
    name, rest = parts
    old, arrow, new = rest.partition(_ARROW)
    if not arrow or not old.strip():
        # `~ tags = {` opens a nested in-place block; its own lines carry the changes
        return None
    new = new.strip()
    return PlanLine(
        kind=LineKind.CHANGE,
        raw=line,
        name=name,
        value=old.strip(),
        new_value=new,
        significant=not _is_computed(new),
    )


def _match_addition(line: str, stripped: str) -> PlanLine | None:
    if not line[:1].isspace() or not stripped.startswith("+") or not stripped[1:2].isspace():
        return None
    parts = _split_assignment(stripped[1:])
    if parts is None:
        return None
    name, value = parts
    return PlanLine(kind=LineKind.ADDITION, raw=line, name=name, value=value, significant=not _is_computed(value))


def _match_deletion(line: str, stripped: str) -> PlanLine | None:
    if not line[:1].isspace() or not stripped.startswith("-") or not stripped[1:2].isspace():
        return None
    parts = _split_assignment(stripped[1:])
    if parts is None:
        return None
    name, value = parts
    # `- name = "x" -> null` is the before half of a pair; `- rules = [` opens a
    # block whose removed entries follow on later lines.
    paired = _ARROW in value
    opens_block = value.rstrip().endswith(("[", "{"))
    return PlanLine(
        kind=LineKind.DELETION,
        raw=line,
        name=name,
        value=value,
        significant=not paired and not opens_block,
    )


def tokenize(plan_text: str) -> list[PlanLine]:
    """Tag every line of ``plan_text`` with its ``LineKind``."""
    lines = []
    for line in plan_text.splitlines():
        stripped = line.strip()
        token = (
            _match_summary(line)
            or _match_change(line, stripped)
            or _match_addition(line, stripped)
            or _match_deletion(line, stripped)
        )
        lines.append(token or PlanLine(kind=LineKind.OTHER, raw=line))
    return lines


def classify(plan_text: str) -> ClassificationResult:
    """Decide whether ``plan_text`` is a worker-code-only update that can be collapsed."""
    tokens = tokenize(plan_text or "")

    summary = next((t for t in tokens if t.kind is LineKind.SUMMARY), None)
    has_only_updates = False
    if summary is not None:
        add, change, destroy = summary.counts
        has_only_updates = add == 0 and destroy == 0 and change > 0

    changed_attrs = [t.name for t in tokens if t.kind is LineKind.CHANGE and t.significant]
    has_real_additions = any(t.kind is LineKind.ADDITION and t.significant for t in tokens)
    has_real_deletions = any(t.kind is LineKind.DELETION and t.significant for t in tokens)
    has_resource_changes = any(marker in plan_text for marker in RESOURCE_CHANGE_MARKERS) if plan_text else False

    code_only = (
        has_only_updates
        and not has_real_additions
        and not has_real_deletions
        and len(changed_attrs) > 0
        and all(attr in CODE_ATTRIBUTES for attr in changed_attrs)
    )

    return ClassificationResult(
        should_collapse=code_only and not has_resource_changes,
        has_only_updates=has_only_updates,
        changed_attrs=changed_attrs,
        has_real_additions=has_real_additions,
        has_real_deletions=has_real_deletions,
        has_resource_changes=has_resource_changes,
    )
