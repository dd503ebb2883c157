"""Pull-based line sources.

The builder reads its input through a one-line lookahead interface
(``peek`` / ``pull``).  A subtest is parsed from an :class:`IndentedView`
of its parent's source, which yields the deeper-indented lines with the
region's indentation removed and reports end of input as soon as a line
returns to the parent's baseline.  Views stack, so nested subtests read
the original input lazily without buffering it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from tapdoc.parsing.classifier import measure_indent


@dataclass
class SourceLine:
    """A line of input and its 1-based position in the original stream."""

    number: int
    text: str


def iter_lines(source: str | Iterable[str]) -> Iterator[str]:
    """Yield lines from a string, a list of lines, or a text file object."""
    if isinstance(source, str):
        lines = source.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        yield from lines
        return
    yield from source


def dedent(text: str, width: int) -> str:
    """Remove up to ``width`` columns of leading whitespace."""
    return text[min(measure_indent(text), width):]


class LineSource:
    """Top-level reader over an iterable of lines."""

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = iter(lines)
        self._peeked: SourceLine | None = None
        self._count = 0

    def peek(self) -> SourceLine | None:
        if self._peeked is None:
            try:
                raw = next(self._lines)
            except StopIteration:
                return None
            self._count += 1
            self._peeked = SourceLine(number=self._count, text=raw.rstrip("\r\n"))
        return self._peeked

    def pull(self) -> SourceLine | None:
        line = self.peek()
        self._peeked = None
        return line


class IndentedView:
    """The lines of a subtest region, de-indented by ``indent`` columns.

    A line belongs to the region while it is blank or indented deeper than
    the parent's baseline.
    """

    def __init__(self, parent: LineReader, indent: int) -> None:
        self.parent = parent
        self.indent = indent

    def _in_region(self, line: SourceLine) -> bool:
        return not line.text.strip() or measure_indent(line.text) > 0

    def peek(self) -> SourceLine | None:
        line = self.parent.peek()
        if line is None or not self._in_region(line):
            return None
        return SourceLine(number=line.number, text=dedent(line.text, self.indent))

    def pull(self) -> SourceLine | None:
        line = self.peek()
        if line is not None:
            self.parent.pull()
        return line

    def drain(self) -> int:
        """Consume the rest of the region, returning the number of lines."""
        count = 0
        while self.pull() is not None:
            count += 1
        return count


LineReader = Union[LineSource, IndentedView]
