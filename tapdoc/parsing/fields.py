"""Per-kind field grammars.

Each parser takes the ``body`` of a classified line (leading whitespace
already removed) and returns a model value, or ``None`` when the line has
the right shape for its kind but its fields do not parse.  The builder
decides what to do with a ``None``; these functions never raise on input.
"""

from __future__ import annotations

import re

from tapdoc.model import (
    BailOut,
    Directive,
    Plan,
    Pragma,
    TestPoint,
)

# Oldest TAP version that carries a version line
MIN_VERSION = 13

_VERSION_RE = re.compile(r"^TAP version\s+(\S+)\s*$")
_PLAN_RE = re.compile(r"^(\d+)\.\.(\d+)\s*(?:#\s*(.*?))?\s*$")
_SKIP_RE = re.compile(r"^skip\b\s*(.*)$", re.IGNORECASE)
_TEST_POINT_RE = re.compile(r"^(not )?ok(?:\s+(.*))?$")
_NUMBER_RE = re.compile(r"^(\d+)(?:\s+(.*))?$")
_DIRECTIVE_RE = re.compile(r"^\s*(skip|todo)\b\s*(.*)$", re.IGNORECASE)
_BAIL_OUT_RE = re.compile(r"^bail out!\s*(.*)$", re.IGNORECASE)
_PRAGMA_RE = re.compile(r"^pragma\s+(.*)$")
_PRAGMA_TOKEN_RE = re.compile(r"^([+-])([A-Za-z0-9_][\w.-]*)$")
_SUBTEST_HEADER_RE = re.compile(r"^subtest\b(?:\s*:\s*(.*))?$", re.IGNORECASE)
_UNESCAPE_RE = re.compile(r"\\([\\#])")


def parse_version(body: str) -> int | None:
    """Parse ``TAP version N``.  Returns None unless N is an integer >= 13."""
    m = _VERSION_RE.match(body)
    if m is None or not m.group(1).isdigit():
        return None
    version = int(m.group(1))
    if version < MIN_VERSION:
        return None
    return version


def parse_plan(body: str) -> Plan | None:
    """Parse ``start..end`` with an optional ``# SKIP reason`` comment."""
    m = _PLAN_RE.match(body)
    if m is None:
        return None

    plan = Plan(start=int(m.group(1)), end=int(m.group(2)))
    comment = m.group(3)
    if comment is not None:
        skip = _SKIP_RE.match(comment)
        if skip is not None:
            plan.skip_reason = skip.group(1).strip()
        elif comment:
            plan.comment = comment
    return plan


def _split_directive(text: str) -> tuple[str, Directive | None]:
    """Split ``text`` at the first unescaped ``#`` that starts a directive.

    A ``#`` is a directive marker only when the next token is SKIP or TODO.
    Any other ``#`` belongs to the description.
    """
    escaped = False
    for idx, char in enumerate(text):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char != "#":
            continue
        m = _DIRECTIVE_RE.match(text[idx + 1:])
        if m is not None:
            directive = Directive(kind=m.group(1).lower(), reason=m.group(2).strip())
            return text[:idx], directive
    return text, None


def unescape_description(text: str) -> str:
    """Undo ``\\#`` and ``\\\\`` escapes."""
    return _UNESCAPE_RE.sub(r"\1", text)


def parse_test_point(body: str) -> TestPoint | None:
    """Parse ``("ok"|"not ok") [number] ["-"] [description] [directive]``."""
    m = _TEST_POINT_RE.match(body.rstrip())
    if m is None:
        return None

    ok = m.group(1) is None
    rest = (m.group(2) or "").strip()

    number: int | None = None
    num = _NUMBER_RE.match(rest)
    if num is not None:
        number = int(num.group(1))
        rest = (num.group(2) or "").strip()

    if rest.startswith("-"):
        rest = rest[1:].lstrip()

    desc, directive = _split_directive(rest)
    desc = unescape_description(desc.strip())

    return TestPoint(
        ok=ok,
        number=number,
        description=desc or None,
        directive=directive,
    )


def parse_bail_out(body: str) -> BailOut | None:
    """Parse ``Bail out!`` with an optional reason."""
    m = _BAIL_OUT_RE.match(body.rstrip())
    if m is None:
        return None
    return BailOut(reason=m.group(1).strip())


def parse_pragmas(body: str) -> list[Pragma] | None:
    """Parse ``pragma +a, -b`` into pragma records.

    A single malformed token rejects the whole line.
    """
    m = _PRAGMA_RE.match(body.rstrip())
    if m is None:
        return None
    tokens = [t for t in re.split(r"[,\s]+", m.group(1)) if t]
    if not tokens:
        return None

    pragmas: list[Pragma] = []
    for token in tokens:
        tm = _PRAGMA_TOKEN_RE.match(token)
        if tm is None:
            return None
        pragmas.append(Pragma(name=tm.group(2), enabled=tm.group(1) == "+"))
    return pragmas


def parse_diagnostic(body: str) -> str:
    """Text of a ``#`` comment, without the marker and outer whitespace."""
    return body[1:].strip()


def match_subtest_header(text: str) -> str | None:
    """Recognize a ``Subtest`` / ``Subtest: name`` diagnostic text.

    Returns None if ``text`` is not a header, otherwise the subtest name
    (empty for a bare header).
    """
    m = _SUBTEST_HEADER_RE.match(text)
    if m is None:
        return None
    return (m.group(1) or "").strip()
