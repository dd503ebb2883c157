"""Syntactic line classification.

Every line maps to exactly one kind.  Classification looks only at the
shape of the line; field contents are left to :mod:`tapdoc.parsing.fields`
and indentation depth is measured but left to the builder and the subtest
resolver to interpret.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Line kinds
VERSION = "version"
PLAN = "plan"
TEST_POINT = "test_point"
DIAGNOSTIC = "diagnostic"
DATA_OPEN = "data_open"
DATA_CLOSE = "data_close"
BAIL_OUT = "bail_out"
PRAGMA = "pragma"
BLANK = "blank"
UNRECOGNIZED = "unrecognized"

DATA_DELIMITERS = frozenset({DATA_OPEN, DATA_CLOSE})

_VERSION_RE = re.compile(r"^TAP version\b")
_PLAN_RE = re.compile(r"^\d+\.\.\d+(?:\s|#|$)")
_TEST_POINT_RE = re.compile(r"^(?:not )?ok(?:\s|$)")
_BAIL_OUT_RE = re.compile(r"^bail out!", re.IGNORECASE)
_PRAGMA_RE = re.compile(r"^pragma\s+[+-]")


@dataclass
class ClassifiedLine:
    """A line tagged with its kind.

    ``text`` is the line as received (newline stripped), ``indent`` the
    width of its leading whitespace and ``body`` the text after it.
    """

    kind: str
    indent: int
    body: str
    text: str

    @property
    def is_blank(self) -> bool:
        return self.kind == BLANK


def measure_indent(text: str) -> int:
    """Width of the leading whitespace; a tab counts as one column."""
    return len(text) - len(text.lstrip(" \t"))


def classify_line(text: str) -> ClassifiedLine:
    """Classify one line of TAP input."""
    indent = measure_indent(text)
    body = text[indent:]
    stripped = body.rstrip()

    if not stripped:
        kind = BLANK
    elif _VERSION_RE.match(body):
        kind = VERSION
    elif _PLAN_RE.match(body):
        kind = PLAN
    elif _TEST_POINT_RE.match(body):
        kind = TEST_POINT
    elif stripped == "---":
        kind = DATA_OPEN
    elif stripped == "...":
        kind = DATA_CLOSE
    elif _BAIL_OUT_RE.match(body):
        kind = BAIL_OUT
    elif body.startswith("#"):
        kind = DIAGNOSTIC
    elif _PRAGMA_RE.match(body):
        kind = PRAGMA
    else:
        kind = UNRECOGNIZED

    return ClassifiedLine(kind=kind, indent=indent, body=body, text=text)
