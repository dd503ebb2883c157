"""Subtest region resolution.

A subtest is a complete TAP document indented under its parent.  The
resolver hands a de-indented view of the region to a fresh builder, then
matches the resulting document with the summary test point that follows
the region at the parent's indentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from tapdoc.model import (
    INCONSISTENT_SUBTEST_SUMMARY,
    NESTING_TOO_DEEP,
    STATUS_BAILED_OUT,
    BailOut,
    Condition,
    Document,
    TestPoint,
)
from tapdoc.parsing.classifier import TEST_POINT, classify_line
from tapdoc.parsing.errors import NestingTooDeep
from tapdoc.parsing.fields import parse_test_point
from tapdoc.parsing.stream import IndentedView, LineReader

RegionParser = Callable[[IndentedView], Document]

_STACK_EXHAUSTED = "subtest nesting exceeds the interpreter recursion limit"


@dataclass
class SubtestResult:
    """The summary point owning the subtest, and a bail-out to propagate."""

    summary: TestPoint
    bail_out: BailOut | None = None


def _synthetic_summary(name: str | None, line: int) -> TestPoint:
    return TestPoint(ok=False, description=name, line=line)


def _skip_region(view: IndentedView, reason: str, line: int) -> Condition:
    skipped = view.drain()
    return Condition(
        kind=NESTING_TOO_DEEP,
        message=f"{reason}; skipped {skipped} line(s)",
        line=line,
    )


def resolve_subtest(
    source: LineReader,
    indent: int,
    start_line: int,
    parse_region: RegionParser,
    name: str | None = None,
) -> SubtestResult:
    """Parse the region starting at the next line of ``source``.

    Args:
        source: The parent's line reader, positioned on the region's
            first line.
        indent: Indentation of that first line; stripped from every line
            of the region.
        start_line: Source line number of the region's first line.
        parse_region: Builds a document from the region view.  If it raises
            :class:`NestingTooDeep` or runs out of stack (``RecursionError``)
            the region is skipped and flagged on the summary point.
        name: Subtest name from a ``# Subtest:`` header in the parent.

    Returns:
        A :class:`SubtestResult` whose summary owns the inner document.
    """
    view = IndentedView(source, indent)
    inner: Document | None
    too_deep: Condition | None = None
    try:
        inner = parse_region(view)
    except NestingTooDeep as exc:
        inner = None
        too_deep = _skip_region(view, str(exc), start_line)
    except RecursionError:
        # Draining may exhaust the stack again; an enclosing region then
        # catches it with more room to spare.
        inner = None
        too_deep = _skip_region(view, _STACK_EXHAUSTED, start_line)

    if inner is not None and name:
        inner.name = name
    label = name or (inner.name if inner is not None else None)

    if inner is not None and inner.status == STATUS_BAILED_OUT:
        # Nothing after a bail-out is parsed, including the summary line.
        cut = _synthetic_summary(label, start_line)
        cut.subtest = inner
        return SubtestResult(summary=cut, bail_out=inner.bail_out)

    summary: TestPoint | None = None
    line = source.peek()
    if line is not None:
        classified = classify_line(line.text)
        if classified.kind == TEST_POINT:
            summary = parse_test_point(classified.body)

    if summary is None:
        summary = _synthetic_summary(label, start_line)
        ending = repr(line.text) if line is not None else "end of input"
        summary.conditions.append(Condition(
            kind=INCONSISTENT_SUBTEST_SUMMARY,
            message=f"subtest is not followed by a test point (found {ending})",
            line=line.number if line is not None else start_line,
        ))
    else:
        source.pull()
        summary.line = line.number

    summary.subtest = inner
    if too_deep is not None:
        summary.conditions.append(too_deep)
    return SubtestResult(summary=summary)
