"""Exceptions raised inside the parsing engine.

None of these escape :func:`tapdoc.parsing.builder.parse`; they are caught
at the subtest boundary and turned into conditions on the summary point.
"""

from __future__ import annotations


class NestingTooDeep(Exception):
    """A subtest is nested deeper than the configured limit."""

    def __init__(self, depth: int, max_depth: int) -> None:
        super().__init__(
            f"subtest nesting depth {depth} exceeds limit {max_depth}"
        )
        self.depth: int = depth
        self.max_depth: int = max_depth
