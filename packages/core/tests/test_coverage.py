"""Tests for the diff-coverage gate."""

import json
import types
from unittest.mock import MagicMock

import pytest

from ciguard_core.coverage import (
    CoverageReport,
    EventKind,
    evaluate,
    load_coverage_report,
    parse_coverage_report,
)
from ciguard_core.gh.event import PullRequestContext

LABEL = "coverage-override"


def review(login, state):
    return types.SimpleNamespace(user=types.SimpleNamespace(login=login), state=state)


def reader_for(content):
    return lambda path: content


def report(percent, total_lines=100):
    return CoverageReport(percent=percent, total_lines=total_lines)


def pr(author="alice", labels=()):
    return PullRequestContext(number=7, author=author, labels=list(labels))


def run_gate(cov_report, labels=(), codeowners="* @alice @bob\n", reviews=(), author="alice", threshold=80):
    fetch = MagicMock(return_value=list(reviews))
    decision = evaluate(
        cov_report,
        pr(author, labels),
        fetch,
        list(labels),
        threshold,
        reader=reader_for(codeowners),
    )
    return decision, fetch


# ---------------------------------------------------------------------------
# parse_coverage_report / load_coverage_report
# ---------------------------------------------------------------------------


class TestParseCoverageReport:
    def test_valid_report(self):
        parsed = parse_coverage_report({"total_percent_covered": 91.5, "total_num_lines": 40})
        assert parsed == CoverageReport(percent=91.5, total_lines=40)

    def test_empty_object_is_parse_error(self):
        assert parse_coverage_report({}).parse_error is True

    def test_non_numeric_percent_is_parse_error(self):
        assert parse_coverage_report({"total_percent_covered": "91", "total_num_lines": 40}).parse_error is True

    def test_boolean_is_not_a_number(self):
        assert parse_coverage_report({"total_percent_covered": 90, "total_num_lines": True}).parse_error is True

    def test_non_object_is_parse_error(self):
        assert parse_coverage_report([1, 2]).parse_error is True

    def test_zero_lines_needs_no_percent(self):
        parsed = parse_coverage_report({"total_num_lines": 0})
        assert parsed.parse_error is False
        assert parsed.total_lines == 0

    def test_crash_fallback_flag(self):
        parsed = parse_coverage_report({"total_percent_covered": 0, "total_num_lines": 0, "crash_fallback": True})
        assert parsed.crash_fallback is True

    def test_crash_fallback_must_be_true_literal(self):
        parsed = parse_coverage_report({"total_percent_covered": 0, "total_num_lines": 0, "crash_fallback": "yes"})
        assert parsed.crash_fallback is False


class TestLoadCoverageReport:
    def test_reads_json_file(self, tmp_path):
        path = tmp_path / "diff-cover.json"
        path.write_text(json.dumps({"total_percent_covered": 75, "total_num_lines": 12}))
        loaded = load_coverage_report(str(path))
        assert loaded.percent == 75.0
        assert loaded.total_lines == 12

    def test_missing_file_is_parse_error(self, tmp_path):
        assert load_coverage_report(str(tmp_path / "missing.json")).parse_error is True

    def test_invalid_json_is_parse_error(self):
        assert load_coverage_report("r.json", reader=reader_for("{not json")).parse_error is True

    @pytest.mark.parametrize(
        "text",
        [
            '{"total_percent_covered": Infinity, "total_num_lines": 10}',
            '{"total_percent_covered": -Infinity, "total_num_lines": 10}',
            '{"total_percent_covered": NaN, "total_num_lines": 10}',
            '{"total_percent_covered": 90, "total_num_lines": Infinity}',
        ],
    )
    def test_non_finite_numbers_are_parse_errors(self, text):
        loaded = load_coverage_report("r.json", reader=reader_for(text))
        assert loaded.parse_error is True

    def test_infinite_percent_fails_gate(self):
        loaded = load_coverage_report(
            "r.json", reader=reader_for('{"total_percent_covered": Infinity, "total_num_lines": 10}')
        )
        decision, _ = run_gate(loaded)
        assert decision.should_fail is True
        assert decision.coverage_percent is None


# ---------------------------------------------------------------------------
# evaluate
# ---------------------------------------------------------------------------


class TestEvaluate:
    def test_invalid_report_fails(self):
        decision, fetch = run_gate(parse_coverage_report({}))
        assert decision.should_fail is True
        assert decision.coverage_percent is None
        assert "invalid" in decision.reason
        fetch.assert_not_called()

    def test_crash_fails_even_with_override(self):
        crashed = CoverageReport(percent=0, total_lines=0, crash_fallback=True)
        decision, fetch = run_gate(crashed, labels=[LABEL], codeowners="* @alice\n")
        assert decision.should_fail is True
        assert "crash" in decision.reason
        assert decision.override_applied is False
        fetch.assert_not_called()

    def test_doc_only_passes_at_100(self):
        decision, _ = run_gate(parse_coverage_report({"total_num_lines": 0}))
        assert decision.should_fail is False
        assert decision.coverage_percent == 100
        assert "doc" in decision.reason

    def test_at_threshold_passes(self):
        decision, fetch = run_gate(report(80))
        assert decision.should_fail is False
        assert decision.coverage_percent == 80
        assert decision.telemetry_events == []
        fetch.assert_not_called()

    def test_below_threshold_without_label_fails(self):
        decision, fetch = run_gate(report(70))
        assert decision.should_fail is True
        assert decision.reason == "Coverage 70% below 80% threshold"
        fetch.assert_not_called()

    def test_other_labels_do_not_override(self):
        decision, _ = run_gate(report(70), labels=["bug"])
        assert decision.should_fail is True

    def test_override_with_codeowner_approval(self):
        decision, fetch = run_gate(report(70), labels=[LABEL], reviews=[review("bob", "APPROVED")])
        assert decision.should_fail is False
        assert decision.override_applied is True
        assert decision.reason == "Coverage 70% below 80% (override applied)"
        (event,) = decision.telemetry_events
        assert event.kind is EventKind.OVERRIDE_APPLIED
        assert event.to_dict() == {
            "event": "coverage_override_applied",
            "actual_coverage": 70,
            "threshold": 80,
            "has_approval": True,
        }
        fetch.assert_called_once()

    def test_override_solo_developer(self):
        decision, fetch = run_gate(report(70), labels=[LABEL], codeowners="* @alice\n")
        assert decision.should_fail is False
        assert decision.override_applied is True
        fetch.assert_not_called()

    def test_override_without_approval_fails(self):
        decision, _ = run_gate(report(70), labels=[LABEL], codeowners="* @alice @bob\n")
        assert decision.should_fail is True
        assert decision.override_applied is False
        assert "requires CODEOWNERS approval" in decision.reason
        (event,) = decision.telemetry_events
        assert event.kind is EventKind.OVERRIDE_WITHOUT_APPROVAL
        assert event.has_approval is False

    def test_override_self_approval_rejected(self):
        decision, _ = run_gate(report(70), labels=[LABEL], reviews=[review("alice", "APPROVED")])
        assert decision.should_fail is True

    def test_override_without_pr_context_fails(self):
        fetch = MagicMock()
        decision = evaluate(report(70), None, fetch, [LABEL], 80, reader=reader_for("* @alice\n"))
        assert decision.should_fail is True
        fetch.assert_not_called()

    def test_custom_override_label(self):
        fetch = MagicMock(return_value=[review("bob", "APPROVED")])
        decision = evaluate(
            report(70),
            pr(),
            fetch,
            ["skip-coverage"],
            80,
            override_label="skip-coverage",
            reader=reader_for("* @alice @bob\n"),
        )
        assert decision.override_applied is True

    @pytest.mark.parametrize("percent,should_fail", [(79.99, True), (80.0, False), (95.5, False)])
    def test_threshold_boundary(self, percent, should_fail):
        decision, _ = run_gate(report(percent))
        assert decision.should_fail is should_fail

    def test_reason_keeps_full_precision(self):
        decision, _ = run_gate(report(33.333333))
        assert decision.reason == "Coverage 33.333333% below 80% threshold"
