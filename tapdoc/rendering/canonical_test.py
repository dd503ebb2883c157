"""Tests for canonical TAP rendering."""

from __future__ import annotations

from tapdoc.model import (
    DIRECTIVE_SKIP,
    BailOut,
    Directive,
    Document,
    Plan,
    TestPoint,
)
from tapdoc.parsing import parse
from tapdoc.rendering.canonical import (
    escape_description,
    render_plan,
    render_tap,
    render_test_point,
)

CANONICAL = """\
TAP version 14
1..3
pragma +strict
# Subtest: first
    1..1
    ok 1 - inner
ok 1 - first
not ok 2 - second # TODO later
  ---
  got: 1

  want: 2
  ...
ok 3 # SKIP no network
"""


class TestRenderPieces:
    """Tests for individual line renderers."""

    def test_plan_with_skip(self):
        """A skip reason renders as a SKIP comment."""
        assert render_plan(Plan(start=1, end=0, skip_reason="later")) == "1..0 # SKIP later"
        assert render_plan(Plan(start=1, end=0, skip_reason="")) == "1..0 # SKIP"

    def test_plan_with_comment(self):
        """A plain comment is kept."""
        assert render_plan(Plan(start=1, end=0, comment="nothing")) == "1..0 # nothing"

    def test_minimal_point(self):
        """A bare point renders as bare ok."""
        assert render_test_point(TestPoint(ok=True)) == "ok"

    def test_point_with_directive(self):
        """Directive keywords are upper case."""
        point = TestPoint(
            ok=False, number=4, description="d",
            directive=Directive(kind=DIRECTIVE_SKIP, reason=""),
        )
        assert render_test_point(point) == "not ok 4 - d # SKIP"

    def test_escaping(self):
        """Hashes and backslashes are escaped."""
        assert escape_description("a # b \\ c") == "a \\# b \\\\ c"


class TestRenderTap:
    """Tests for whole-document rendering."""

    def test_canonical_text_unchanged(self):
        """Canonical input renders back to itself."""
        assert render_tap(parse(CANONICAL)) == CANONICAL

    def test_trailing_plan_stays_trailing(self):
        """A trailing plan is rendered after the entries."""
        assert render_tap(parse("ok 1\n1..1\n")) == "ok 1\n1..1\n"

    def test_bail_out(self):
        """A bail-out entry renders its reason."""
        document = Document(
            plan=Plan(start=1, end=2),
            entries=[TestPoint(ok=True, number=1), BailOut(reason="stop")],
        )
        assert render_tap(document) == "1..2\nok 1\nBail out! stop\n"

    def test_roundtrip_normalizes(self):
        """Non-canonical spacing parses to the same document after rendering."""
        source = (
            "TAP version 14\n"
            "1..3\n"
            "ok 1    this has # hash \\# and \\\\ slash\n"
            "not ok 2 - broken #   todo  not yet\n"
            "    ok\n"
            "    1..1\n"
            "ok 3 - sub\n"
        )
        document = parse(source)
        assert parse(render_tap(document)) == document

    def test_roundtrip_keeps_unknown_lines(self):
        """Unknown lines are written back verbatim."""
        document = parse("1..1\nnoise\nok 1\n")
        assert "noise\n" in render_tap(document)
        assert parse(render_tap(document)).entries == document.entries
