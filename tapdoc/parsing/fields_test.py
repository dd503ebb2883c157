"""Tests for the per-kind field grammars."""

from __future__ import annotations

import pytest

from tapdoc.model import DIRECTIVE_SKIP, DIRECTIVE_TODO, Directive, Plan, TestPoint
from tapdoc.parsing.fields import (
    match_subtest_header,
    parse_bail_out,
    parse_diagnostic,
    parse_plan,
    parse_pragmas,
    parse_test_point,
    parse_version,
    unescape_description,
)


class TestVersion:
    """Tests for TAP version lines."""

    def test_version_14(self):
        """TAP version 14 parses."""
        assert parse_version("TAP version 14") == 14

    def test_version_13(self):
        """TAP version 13 is the oldest accepted."""
        assert parse_version("TAP version 13") == 13

    @pytest.mark.parametrize("body", [
        "TAP version 12",
        "TAP version fourteen",
        "TAP version",
        "TAP version 14 extra",
        "TAP version -14",
    ])
    def test_invalid_versions(self, body):
        """Non-integer or pre-13 versions are rejected."""
        assert parse_version(body) is None


class TestPlan:
    """Tests for plan lines."""

    def test_simple_plan(self):
        """A plain plan has no skip reason."""
        assert parse_plan("1..5") == Plan(start=1, end=5)

    def test_skip_plan(self):
        """A SKIP comment becomes the skip reason."""
        plan = parse_plan("1..0 # SKIP no database")
        assert plan == Plan(start=1, end=0, skip_reason="no database")
        assert plan.skips_all
        assert plan.is_valid

    def test_skip_is_case_insensitive(self):
        """The SKIP keyword matches in any case."""
        assert parse_plan("1..0 # skip later").skip_reason == "later"

    def test_bare_skip(self):
        """SKIP without a reason gives an empty reason."""
        assert parse_plan("1..0 # SKIP").skip_reason == ""

    def test_other_comment_kept(self):
        """A non-SKIP comment is kept apart from the skip reason."""
        plan = parse_plan("1..0 # no tests to run")
        assert plan.skip_reason is None
        assert plan.comment == "no tests to run"
        assert not plan.is_valid

    def test_nonzero_start_recorded(self):
        """A start other than 1 is recorded as-is."""
        plan = parse_plan("3..7")
        assert plan.start == 3
        assert plan.end == 7
        assert plan.expected_count == 5

    def test_reversed_range_plans_nothing(self):
        """end < start means no tests planned."""
        plan = parse_plan("5..2")
        assert plan.skips_all
        assert plan.expected_count == 0

    def test_trailing_garbage(self):
        """Text after the range that is not a comment fails."""
        assert parse_plan("1..2 junk") is None


class TestTestPoint:
    """Tests for test point lines."""

    def test_full_line(self):
        """Status, number and description are extracted."""
        assert parse_test_point("ok 1 - this is a success") == TestPoint(
            ok=True, number=1, description="this is a success",
        )

    def test_not_ok(self):
        """not ok gives ok=False."""
        point = parse_test_point("not ok 2 - fail")
        assert point.ok is False
        assert point.number == 2

    def test_bare(self):
        """A bare ok has no number and no description."""
        assert parse_test_point("ok") == TestPoint(ok=True)
        assert parse_test_point("not ok") == TestPoint(ok=False)

    def test_number_only(self):
        """A number without description."""
        assert parse_test_point("ok 1") == TestPoint(ok=True, number=1)

    def test_description_without_dash(self):
        """The dash before the description is optional."""
        point = parse_test_point("ok 1 this is a bare description - with a dash!")
        assert point.number == 1
        assert point.description == "this is a bare description - with a dash!"

    def test_description_without_number(self):
        """A description may follow the status directly."""
        point = parse_test_point("ok - this is a dash description - with a dash!")
        assert point.number is None
        assert point.description == "this is a dash description - with a dash!"

    def test_number_glued_to_text_is_description(self):
        """Digits not followed by whitespace are part of the description."""
        point = parse_test_point("ok 1st try")
        assert point.number is None
        assert point.description == "1st try"

    def test_skip_directive(self):
        """# SKIP becomes a skip directive; ok is unchanged."""
        point = parse_test_point("ok 1 - desc # SKIP  has no power")
        assert point.ok is True
        assert point.description == "desc"
        assert point.directive == Directive(kind=DIRECTIVE_SKIP, reason="has no power")

    def test_todo_directive(self):
        """# TODO becomes a todo directive; not ok is kept."""
        point = parse_test_point("not ok 2 - b # TODO fix")
        assert point.ok is False
        assert point.directive == Directive(kind=DIRECTIVE_TODO, reason="fix")
        assert not point.is_failure

    def test_mixed_case_directive(self):
        """Directive keywords are case-insensitive."""
        point = parse_test_point("ok 1 - desc # sKiP")
        assert point.directive == Directive(kind=DIRECTIVE_SKIP, reason="")

    def test_directive_without_description(self):
        """A directive may follow the number directly."""
        point = parse_test_point("ok 3 # skip not on this platform")
        assert point.description is None
        assert point.directive.reason == "not on this platform"

    def test_non_directive_hash_stays_in_description(self):
        """A # comment that is not SKIP/TODO is part of the description."""
        point = parse_test_point("ok 1 - issue #42 # TODO flaky")
        assert point.description == "issue #42"
        assert point.directive == Directive(kind=DIRECTIVE_TODO, reason="flaky")

    def test_empty_hash_stays_in_description(self):
        """A trailing bare # is not a directive."""
        point = parse_test_point("ok 1 - desc #")
        assert point.description == "desc #"
        assert point.directive is None

    def test_word_starting_with_keyword_is_not_directive(self):
        """# SKIPPED is not a SKIP directive."""
        point = parse_test_point("ok 1 - desc # SKIPPED")
        assert point.directive is None
        assert point.description == "desc # SKIPPED"

    def test_escaped_hash(self):
        """An escaped # never starts a directive and is unescaped."""
        point = parse_test_point(r"ok 1 - count \# TODO items")
        assert point.directive is None
        assert point.description == "count # TODO items"

    def test_escaped_backslash(self):
        """A doubled backslash is a literal backslash."""
        point = parse_test_point(r"ok 1 - path C:\\tmp # SKIP windows")
        assert point.description == "path C:\\tmp"
        assert point.directive.is_skip


class TestOtherFields:
    """Tests for bail-out, pragma, diagnostic and subtest header parsing."""

    def test_bail_out_reason(self):
        """The reason follows Bail out!."""
        assert parse_bail_out("Bail out! We wanted to").reason == "We wanted to"

    def test_bail_out_without_reason(self):
        """The reason is optional."""
        assert parse_bail_out("Bail out!").reason == ""

    def test_pragmas_comma_and_space_separated(self):
        """Pragmas may be separated by commas or spaces."""
        pragmas = parse_pragmas("pragma +strict, -verbose +color")
        assert [(p.name, p.enabled) for p in pragmas] == [
            ("strict", True),
            ("verbose", False),
            ("color", True),
        ]

    def test_malformed_pragma(self):
        """A token without a sign rejects the line."""
        assert parse_pragmas("pragma +strict verbose") is None

    def test_diagnostic_text(self):
        """The # marker and surrounding whitespace are removed."""
        assert parse_diagnostic("#   This is a comment  ") == "This is a comment"

    def test_subtest_header_with_name(self):
        """Subtest: name yields the name."""
        assert match_subtest_header("Subtest: inner") == "inner"

    def test_bare_subtest_header(self):
        """A bare Subtest header yields an empty name."""
        assert match_subtest_header("Subtest") == ""

    def test_not_a_subtest_header(self):
        """Other comments are not headers."""
        assert match_subtest_header("Subtests are fun") is None
        assert match_subtest_header("hello") is None

    def test_unescape(self):
        """Only \\# and \\\\ are escapes."""
        assert unescape_description(r"a\#b\\c\n") == "a#b\\c\\n"
