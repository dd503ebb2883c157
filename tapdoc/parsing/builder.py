"""Document builder: the single pass that turns TAP lines into a Document.

Lines are pulled one at a time.  Each is classified, then either consumed
directly (version, plan, test point, diagnostic, pragma, bail-out),
opens a data block attached to the preceding test point, or opens a
subtest region parsed by a nested builder reading the same input through
an indented view.

``parse`` never fails on malformed TAP.  Problems are recorded as
:class:`~tapdoc.model.Condition` records and the offending text is kept
as an :class:`~tapdoc.model.UnknownLine`.  Only errors from the input
itself (for example ``OSError`` while reading a file) propagate.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from tapdoc.model import (
    DUPLICATE_PLAN,
    MALFORMED_VERSION,
    STATUS_BAILED_OUT,
    STATUS_COMPLETED,
    STATUS_INCOMPLETE,
    UNRECOGNIZED_LINE,
    UNTERMINATED_DATA_BLOCK,
    BailOut,
    Condition,
    Diagnostic,
    Document,
    TestPoint,
    UnknownLine,
)
from tapdoc.parsing.classifier import (
    BAIL_OUT,
    DATA_DELIMITERS,
    DATA_OPEN,
    DIAGNOSTIC,
    PLAN,
    PRAGMA,
    TEST_POINT,
    VERSION,
    ClassifiedLine,
    classify_line,
)
from tapdoc.parsing.data_block import collect_data_block
from tapdoc.parsing.errors import NestingTooDeep
from tapdoc.parsing.fields import (
    match_subtest_header,
    parse_bail_out,
    parse_diagnostic,
    parse_plan,
    parse_pragmas,
    parse_test_point,
    parse_version,
)
from tapdoc.parsing.stream import IndentedView, LineReader, LineSource, iter_lines
from tapdoc.parsing.subtest import resolve_subtest

# Default limit on subtest nesting; None leaves only the interpreter stack
# as a bound, and regions past it are skipped and flagged the same way.
DEFAULT_MAX_DEPTH = 100


class DocumentBuilder:
    """Builds one document from a line reader.

    ``depth`` is 0 for the top-level document and grows by one per
    subtest level.  A builder is single-use.
    """

    def __init__(
        self,
        source: LineReader,
        depth: int = 0,
        max_depth: int | None = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.source = source
        self.depth = depth
        self.max_depth = max_depth
        self.document = Document()
        self._position = 0
        self._points_seen = 0
        self._seen_content = False
        self._plan_misplaced = False
        # Test point a following "---" would attach to
        self._open_point: TestPoint | None = None
        # Name from a "# Subtest" header directly before a region
        self._header: str | None = None
        # Header that opened a subtest document, pending until it is clear
        # it does not belong to a deeper region instead
        self._leading_header: str | None = None

    def build(self) -> Document:
        """Consume the source and return the finished document.

        Raises:
            NestingTooDeep: If ``depth`` exceeds ``max_depth``.  Nothing
                has been read from the source at that point.
        """
        if self.max_depth is not None and self.depth > self.max_depth:
            raise NestingTooDeep(self.depth, self.max_depth)

        while self.document.status != STATUS_BAILED_OUT:
            line = self.source.peek()
            if line is None:
                break
            classified = classify_line(line.text)
            if classified.is_blank:
                self.source.pull()
                continue
            self._step(classified, line.number)
            self._seen_content = True

        return self._finalize()

    def _step(self, line: ClassifiedLine, number: int) -> None:
        if line.kind == DATA_OPEN and self._open_point is not None:
            self.source.pull()
            self._collect_data_block(line, number)
            return

        if line.indent > 0 and line.kind not in DATA_DELIMITERS:
            self._resolve_subtest(line, number)
            return

        self.source.pull()
        self._open_point = None
        self._header = None
        self._claim_leading_header()

        if line.kind == VERSION:
            self._read_version(line, number)
        elif line.kind == PLAN:
            self._read_plan(line, number)
        elif line.kind == TEST_POINT:
            self._read_test_point(line, number)
        elif line.kind == DIAGNOSTIC:
            self._read_diagnostic(line, number)
        elif line.kind == BAIL_OUT:
            self._read_bail_out(line, number)
        elif line.kind == PRAGMA:
            self._read_pragma(line, number)
        elif line.kind in DATA_DELIMITERS:
            self._unknown(line, number, "data block delimiter without a preceding test point")
        else:
            self._unknown(line, number, "line matches no TAP grammar")

    # -- entries --------------------------------------------------------

    def _condition(self, kind: str, message: str, number: int) -> None:
        self.document.conditions.append(
            Condition(kind=kind, message=message, line=number)
        )

    def _unknown(
        self,
        line: ClassifiedLine,
        number: int,
        message: str,
        kind: str = UNRECOGNIZED_LINE,
    ) -> None:
        self.document.entries.append(UnknownLine(text=line.text, line=number))
        self._condition(kind, message, number)

    def _add_point(self, point: TestPoint, number: int) -> None:
        if point.line is None:
            point.line = number
        if point.number is not None:
            point.position = point.number
        else:
            point.position = self._position + 1
        self._position = point.position
        self._points_seen += 1
        self.document.entries.append(point)
        self._open_point = point

        plan = self.document.plan
        if plan is not None and plan.trailing and not self._plan_misplaced:
            # A plan must come first or last; keep it but flag it once.
            self._plan_misplaced = True
            self._condition(
                UNRECOGNIZED_LINE,
                f"plan on line {plan.line} is followed by more test points",
                plan.line,
            )

    def _read_version(self, line: ClassifiedLine, number: int) -> None:
        version = parse_version(line.body)
        if version is None:
            self._unknown(line, number, f"invalid TAP version: {line.body!r}", MALFORMED_VERSION)
        elif self._seen_content:
            self._unknown(line, number, "version line must come first", MALFORMED_VERSION)
        else:
            self.document.version = version

    def _read_plan(self, line: ClassifiedLine, number: int) -> None:
        plan = parse_plan(line.body)
        if plan is None:
            self._unknown(line, number, f"malformed plan: {line.body!r}")
        elif self.document.plan is not None:
            self._unknown(
                line, number,
                f"plan already declared on line {self.document.plan.line}",
                DUPLICATE_PLAN,
            )
        else:
            plan.trailing = self._points_seen > 0
            plan.line = number
            self.document.plan = plan

    def _read_test_point(self, line: ClassifiedLine, number: int) -> None:
        point = parse_test_point(line.body)
        if point is None:
            self._unknown(line, number, f"malformed test point: {line.body!r}")
            return
        self._add_point(point, number)

    def _read_diagnostic(self, line: ClassifiedLine, number: int) -> None:
        text = parse_diagnostic(line.body)
        name = match_subtest_header(text)
        if name is not None:
            if self.depth > 0 and not self.document.entries:
                self._leading_header = name
            self._header = name
        self.document.entries.append(Diagnostic(text=text, line=number))

    def _read_bail_out(self, line: ClassifiedLine, number: int) -> None:
        bail_out = parse_bail_out(line.body)
        if bail_out is None:
            self._unknown(line, number, f"malformed bail out: {line.body!r}")
            return
        bail_out.line = number
        self.document.entries.append(bail_out)
        self.document.bail_out = bail_out
        self.document.status = STATUS_BAILED_OUT

    def _read_pragma(self, line: ClassifiedLine, number: int) -> None:
        pragmas = parse_pragmas(line.body)
        if pragmas is None:
            self._unknown(line, number, f"malformed pragma: {line.body!r}")
            return
        for pragma in pragmas:
            pragma.line = number
            self.document.entries.append(pragma)

    # -- nested structures ----------------------------------------------

    def _claim_leading_header(self) -> None:
        if self._leading_header is not None:
            self.document.name = self._leading_header or None
            self._leading_header = None

    def _collect_data_block(self, line: ClassifiedLine, number: int) -> None:
        point = self._open_point
        assert point is not None
        self._open_point = None
        self._header = None

        block = collect_data_block(self.source, line.indent)
        point.data_block = block.text
        if not block.terminated:
            point.conditions.append(Condition(
                kind=UNTERMINATED_DATA_BLOCK,
                message=f"data block opened on line {number} is never closed",
                line=number,
            ))

    def _parse_region(self, view: IndentedView) -> Document:
        return DocumentBuilder(view, self.depth + 1, self.max_depth).build()

    def _resolve_subtest(self, line: ClassifiedLine, number: int) -> None:
        header, self._header = self._header, None
        self._leading_header = None
        self._open_point = None

        result = resolve_subtest(
            self.source,
            line.indent,
            number,
            self._parse_region,
            name=header or None,
        )
        self._add_point(result.summary, number)

        if result.bail_out is not None:
            self._open_point = None
            self.document.bail_out = BailOut(
                reason=result.bail_out.reason, line=result.bail_out.line,
            )
            self.document.status = STATUS_BAILED_OUT

    def _finalize(self) -> Document:
        self._claim_leading_header()
        if self.document.status != STATUS_BAILED_OUT:
            if self.document.plan is None:
                self.document.status = STATUS_INCOMPLETE
            else:
                self.document.status = STATUS_COMPLETED
        return self.document


def parse(
    lines: str | Iterable[str],
    *,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
) -> Document:
    """Parse TAP input into a :class:`~tapdoc.model.Document`.

    Args:
        lines: The whole stream as one string, or any iterable of lines
            (a list, a generator, an open text file).  Trailing newlines
            are stripped.  Iterables are consumed lazily.
        max_depth: Deepest subtest level that is parsed; deeper regions
            are skipped and flagged.  ``None`` disables the limit; regions
            nested beyond what the interpreter stack allows are then
            skipped and flagged instead of raising ``RecursionError``.

    Returns:
        The parsed document.  Malformed input yields a best-effort document
        with conditions attached rather than an exception.

    Raises:
        ValueError: If ``max_depth`` is negative.
    """
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")
    source = LineSource(iter_lines(lines))
    return DocumentBuilder(source, max_depth=max_depth).build()


def parse_file(
    path: str | Path,
    *,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
) -> Document:
    """Parse a UTF-8 TAP file.  I/O and decoding errors propagate."""
    with open(path, encoding="utf-8") as f:
        return parse(f, max_depth=max_depth)
