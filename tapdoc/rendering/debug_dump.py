"""Line-by-line debug dump of a document tree."""

from __future__ import annotations

from tapdoc.model import (
    BailOut,
    Condition,
    Diagnostic,
    Document,
    Pragma,
    TestPoint,
    UnknownLine,
)

_INDENT = "  "


def _describe_condition(condition: Condition) -> str:
    where = f"line {condition.line}" if condition.line is not None else "?"
    return f"! {condition.kind} ({where}): {condition.message}"


def _describe_point(point: TestPoint) -> str:
    parts = [
        f"TestPoint ok={point.ok}",
        f"number={point.number}",
        f"position={point.position}",
        f"description={point.description!r}",
    ]
    if point.directive is not None:
        parts.append(f"directive={point.directive.kind}({point.directive.reason!r})")
    return " ".join(parts)


def dump_lines(document: Document, depth: int = 0) -> list[str]:
    """Describe ``document`` one item per line, subtests indented."""
    pad = _INDENT * depth
    plan = document.plan
    header = [
        f"Document status={document.status}",
        f"version={document.version}",
        f"plan={plan.start}..{plan.end}" if plan is not None else "plan=None",
    ]
    if document.name is not None:
        header.append(f"name={document.name!r}")
    if plan is not None and plan.skip_reason is not None:
        header.append(f"skip_reason={plan.skip_reason!r}")
    lines = [pad + " ".join(header)]

    for condition in document.conditions:
        lines.append(f"{pad}{_INDENT}{_describe_condition(condition)}")

    for entry in document.entries:
        prefix = f"{pad}{_INDENT}[{entry.line}] "
        if isinstance(entry, TestPoint):
            lines.append(prefix + _describe_point(entry))
            for condition in entry.conditions:
                lines.append(f"{pad}{_INDENT * 2}{_describe_condition(condition)}")
            if entry.data_block is not None:
                lines.append(f"{pad}{_INDENT * 2}data_block:")
                for row in entry.data_block.split("\n"):
                    lines.append(f"{pad}{_INDENT * 3}| {row}")
            if entry.subtest is not None:
                lines.extend(dump_lines(entry.subtest, depth + 2))
        elif isinstance(entry, Diagnostic):
            lines.append(prefix + f"Diagnostic {entry.text!r}")
        elif isinstance(entry, BailOut):
            lines.append(prefix + f"BailOut {entry.reason!r}")
        elif isinstance(entry, Pragma):
            lines.append(prefix + f"Pragma {entry.name}={entry.enabled}")
        elif isinstance(entry, UnknownLine):
            lines.append(prefix + f"UnknownLine {entry.text!r}")

    lines.append(
        f"{pad}{_INDENT}= {document.actual_count} test point(s), "
        f"expected {document.expected_count}, "
        f"{len(document.failures)} failure(s)"
    )
    return lines


def dump_document(document: Document) -> str:
    return "\n".join(dump_lines(document)) + "\n"
