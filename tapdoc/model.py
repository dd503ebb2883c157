"""Document model for parsed TAP streams.

A parse produces one :class:`Document`: an ordered list of entries (test
points, diagnostics, pragmas, bail-out markers and unknown lines) plus the
optional version and plan slots.  Subtests are nested ``Document`` values
owned by the :class:`TestPoint` that summarises them, so the whole result
is a plain tree.

Malformed input never raises.  Problems are recorded as :class:`Condition`
records, either on the document (``conditions``) or on the test point they
concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union

# Document terminal states
STATUS_COMPLETED = "completed"
STATUS_BAILED_OUT = "bailed_out"
STATUS_INCOMPLETE = "incomplete"

VALID_STATUSES = frozenset({STATUS_COMPLETED, STATUS_BAILED_OUT, STATUS_INCOMPLETE})

# Directive kinds
DIRECTIVE_SKIP = "skip"
DIRECTIVE_TODO = "todo"

# Non-fatal condition kinds
MALFORMED_VERSION = "malformed_version"
DUPLICATE_PLAN = "duplicate_plan"
UNTERMINATED_DATA_BLOCK = "unterminated_data_block"
INCONSISTENT_SUBTEST_SUMMARY = "inconsistent_subtest_summary"
UNRECOGNIZED_LINE = "unrecognized_line"
NESTING_TOO_DEEP = "nesting_too_deep"

CONDITION_KINDS = frozenset({
    MALFORMED_VERSION,
    DUPLICATE_PLAN,
    UNTERMINATED_DATA_BLOCK,
    INCONSISTENT_SUBTEST_SUMMARY,
    UNRECOGNIZED_LINE,
    NESTING_TOO_DEEP,
})


@dataclass
class Condition:
    """A non-fatal problem found while parsing."""

    kind: str
    message: str
    line: int | None = field(default=None, compare=False)


@dataclass
class Plan:
    """The ``start..end`` plan line.

    ``end < start`` or ``end == 0`` means no tests are planned, which is
    only well-formed together with a ``# SKIP`` reason.  ``comment`` keeps
    a trailing comment that is not a SKIP directive.  ``trailing`` is True
    when the plan came after the first test point.
    """

    start: int
    end: int
    skip_reason: str | None = None
    comment: str | None = None
    trailing: bool = False
    line: int | None = field(default=None, compare=False)

    @property
    def skips_all(self) -> bool:
        """True if the plan declares that no tests will run."""
        return self.end == 0 or self.end < self.start

    @property
    def is_valid(self) -> bool:
        """An empty plan needs a skip reason."""
        return not self.skips_all or self.skip_reason is not None

    @property
    def expected_count(self) -> int:
        """Number of test points the plan announces."""
        if self.skips_all:
            return 0
        return self.end - self.start + 1


@dataclass
class Directive:
    """A SKIP or TODO annotation.  It never changes ``TestPoint.ok``."""

    kind: str
    reason: str = ""

    @property
    def is_skip(self) -> bool:
        return self.kind == DIRECTIVE_SKIP

    @property
    def is_todo(self) -> bool:
        return self.kind == DIRECTIVE_TODO


@dataclass
class TestPoint:
    """One ``ok`` / ``not ok`` line.

    ``position`` is the explicit number, or one more than the previous
    position in the same document when the number is omitted.  It is
    filled in by the builder and ignored by equality, as is ``line``.
    """

    __test__ = False  # not a pytest class

    ok: bool
    number: int | None = None
    description: str | None = None
    directive: Directive | None = None
    data_block: str | None = None
    subtest: Document | None = None
    conditions: list[Condition] = field(default_factory=list)
    position: int = field(default=0, compare=False)
    line: int | None = field(default=None, compare=False)

    @property
    def is_failure(self) -> bool:
        """A failed point that is not excused by a TODO directive."""
        if self.ok:
            return False
        return self.directive is None or not self.directive.is_todo


@dataclass
class Diagnostic:
    """A ``#`` comment line, kept in place among the other entries."""

    text: str
    line: int | None = field(default=None, compare=False)


@dataclass
class BailOut:
    """``Bail out!`` marker; ends its document."""

    reason: str = ""
    line: int | None = field(default=None, compare=False)


@dataclass
class Pragma:
    """``pragma +name`` / ``pragma -name``.  Stored, never acted upon."""

    name: str
    enabled: bool
    line: int | None = field(default=None, compare=False)


@dataclass
class UnknownLine:
    """A line that matched no grammar, or was demoted after a problem."""

    text: str
    line: int | None = field(default=None, compare=False)


Entry = Union[TestPoint, Diagnostic, BailOut, Pragma, UnknownLine]


@dataclass
class Document:
    """A parsed TAP document, top level or subtest."""

    version: int | None = None
    plan: Plan | None = None
    entries: list[Entry] = field(default_factory=list)
    status: str = STATUS_COMPLETED
    bail_out: BailOut | None = None
    name: str | None = None
    conditions: list[Condition] = field(default_factory=list)

    @property
    def test_points(self) -> list[TestPoint]:
        """Top-level test points in order (subtest bodies excluded)."""
        return [e for e in self.entries if isinstance(e, TestPoint)]

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [e for e in self.entries if isinstance(e, Diagnostic)]

    @property
    def unknown_lines(self) -> list[UnknownLine]:
        return [e for e in self.entries if isinstance(e, UnknownLine)]

    @property
    def pragmas(self) -> dict[str, bool]:
        """Pragma states by name; the last occurrence wins."""
        return {e.name: e.enabled for e in self.entries if isinstance(e, Pragma)}

    @property
    def actual_count(self) -> int:
        return len(self.test_points)

    @property
    def expected_count(self) -> int | None:
        """Count announced by the plan, or None without a plan."""
        if self.plan is None:
            return None
        return self.plan.expected_count

    @property
    def has_plan_mismatch(self) -> bool:
        """True if a plan exists and disagrees with the test point count.

        A bailed-out document is not expected to reach its plan, so the
        comparison only applies to documents that ran to completion.
        """
        if self.plan is None or self.status == STATUS_BAILED_OUT:
            return False
        return self.plan.expected_count != self.actual_count

    @property
    def out_of_sequence(self) -> list[TestPoint]:
        """Test points whose explicit number breaks the running sequence."""
        result: list[TestPoint] = []
        previous = 0
        for point in self.test_points:
            if point.number is not None and point.number != previous + 1:
                result.append(point)
            previous = point.position
        return result

    @property
    def failures(self) -> list[TestPoint]:
        return [p for p in self.test_points if p.is_failure]

    @property
    def skipped(self) -> list[TestPoint]:
        return [
            p for p in self.test_points
            if p.directive is not None and p.directive.is_skip
        ]

    @property
    def todos(self) -> list[TestPoint]:
        return [
            p for p in self.test_points
            if p.directive is not None and p.directive.is_todo
        ]

    @property
    def is_passing(self) -> bool:
        """Conventional overall verdict for the document and its subtests.

        The model itself never applies this; it is provided for consumers
        that want the usual TAP harness interpretation.
        """
        if self.status != STATUS_COMPLETED or self.plan is None:
            return False
        if not self.plan.is_valid or self.has_plan_mismatch:
            return False
        if self.failures:
            return False
        return all(
            p.subtest.is_passing for p in self.test_points
            if p.subtest is not None
        )

    def iter_conditions(self) -> Iterator[Condition]:
        """Yield every condition in the tree, document before test points."""
        yield from self.conditions
        for point in self.test_points:
            yield from point.conditions
            if point.subtest is not None:
                yield from point.subtest.iter_conditions()

    @property
    def all_conditions(self) -> list[Condition]:
        return list(self.iter_conditions())
