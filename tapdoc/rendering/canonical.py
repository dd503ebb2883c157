"""Canonical TAP 14 text for a document.

Re-parsing the output of :func:`render_tap` gives back an equal document
for anything the parser itself produced without conditions.  Subtests are
indented four spaces, data blocks two spaces under their test point.
"""

from __future__ import annotations

from tapdoc.model import (
    BailOut,
    Diagnostic,
    Directive,
    Document,
    Plan,
    Pragma,
    TestPoint,
    UnknownLine,
)

SUBTEST_INDENT = "    "
DATA_BLOCK_INDENT = "  "


def escape_description(text: str) -> str:
    return text.replace("\\", "\\\\").replace("#", "\\#")


def render_plan(plan: Plan) -> str:
    line = f"{plan.start}..{plan.end}"
    if plan.skip_reason is not None:
        line += f" # SKIP {plan.skip_reason}".rstrip()
    elif plan.comment:
        line += f" # {plan.comment}"
    return line


def render_directive(directive: Directive) -> str:
    return f"# {directive.kind.upper()} {directive.reason}".rstrip()


def render_test_point(point: TestPoint) -> str:
    parts = ["ok" if point.ok else "not ok"]
    if point.number is not None:
        parts.append(str(point.number))
    if point.description is not None:
        parts.append(f"- {escape_description(point.description)}")
    if point.directive is not None:
        parts.append(render_directive(point.directive))
    return " ".join(parts)


def _render_data_block(text: str) -> list[str]:
    lines = [f"{DATA_BLOCK_INDENT}---"]
    for row in text.split("\n"):
        lines.append(f"{DATA_BLOCK_INDENT}{row}" if row else "")
    lines.append(f"{DATA_BLOCK_INDENT}...")
    return lines


def render_lines(document: Document) -> list[str]:
    """Render ``document`` as a list of lines without newlines."""
    lines: list[str] = []
    if document.version is not None:
        lines.append(f"TAP version {document.version}")

    plan = document.plan
    if plan is not None and not plan.trailing:
        lines.append(render_plan(plan))

    for entry in document.entries:
        if isinstance(entry, TestPoint):
            if entry.subtest is not None:
                lines.extend(
                    f"{SUBTEST_INDENT}{row}" if row else ""
                    for row in render_lines(entry.subtest)
                )
            lines.append(render_test_point(entry))
            if entry.data_block is not None:
                lines.extend(_render_data_block(entry.data_block))
        elif isinstance(entry, Diagnostic):
            lines.append(f"# {entry.text}".rstrip())
        elif isinstance(entry, BailOut):
            lines.append(f"Bail out! {entry.reason}".rstrip())
        elif isinstance(entry, Pragma):
            lines.append(f"pragma {'+' if entry.enabled else '-'}{entry.name}")
        elif isinstance(entry, UnknownLine):
            lines.append(entry.text)

    if plan is not None and plan.trailing:
        lines.append(render_plan(plan))
    return lines


def render_tap(document: Document) -> str:
    """Render ``document`` as TAP text ending with a newline."""
    return "".join(f"{line}\n" for line in render_lines(document))
