"""TAP parsing engine: classification, field grammars, data blocks, subtests."""

from tapdoc.parsing.builder import DEFAULT_MAX_DEPTH, DocumentBuilder, parse, parse_file
from tapdoc.parsing.classifier import ClassifiedLine, classify_line
from tapdoc.parsing.errors import NestingTooDeep

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "ClassifiedLine",
    "DocumentBuilder",
    "NestingTooDeep",
    "classify_line",
    "parse",
    "parse_file",
]
