"""Parser and document model for Test Anything Protocol (TAP) streams."""

from tapdoc.model import (
    BailOut,
    Condition,
    Diagnostic,
    Directive,
    Document,
    Plan,
    Pragma,
    TestPoint,
    UnknownLine,
)
from tapdoc.parsing import parse, parse_file

__all__ = [
    "BailOut",
    "Condition",
    "Diagnostic",
    "Directive",
    "Document",
    "Plan",
    "Pragma",
    "TestPoint",
    "UnknownLine",
    "parse",
    "parse_file",
]
