"""Tests for CLI logging setup."""

import logging

from ciguard_cli.logs import AnnotationFormatter


def _record(level, msg):
    return logging.LogRecord("ciguard", level, __file__, 1, msg, None, None)


def test_warning_becomes_annotation():
    assert AnnotationFormatter("%(message)s").format(_record(logging.WARNING, "low coverage")) == "::warning::low coverage"


def test_error_becomes_annotation():
    assert AnnotationFormatter("%(message)s").format(_record(logging.ERROR, "boom")).startswith("::error::")


def test_info_left_plain():
    assert AnnotationFormatter("%(message)s").format(_record(logging.INFO, "done")) == "done"


def test_multiline_message_escaped():
    formatted = AnnotationFormatter("%(message)s").format(_record(logging.WARNING, "line1\nline2 100%"))
    assert formatted == "::warning::line1%0Aline2 100%25"
