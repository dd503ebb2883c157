"""Collection of ``---`` / ``...`` structured-data blocks.

The payload is kept as opaque text: the lines between the delimiters with
the opener's indentation removed, joined with newlines.
"""

from __future__ import annotations

from dataclasses import dataclass

from tapdoc.parsing.classifier import DATA_CLOSE, classify_line
from tapdoc.parsing.stream import LineReader, dedent


@dataclass
class DataBlock:
    """Text collected after a ``---`` opener."""

    text: str
    terminated: bool


def collect_data_block(source: LineReader, indent: int) -> DataBlock:
    """Read block lines from ``source`` after the opener has been consumed.

    Stops after a ``...`` line at ``indent``.  A non-blank line indented
    less than the opener, or the end of input, ends the block without a
    closer; that line is left unread for the caller.
    """
    collected: list[str] = []

    while True:
        line = source.peek()
        if line is None:
            break

        classified = classify_line(line.text)
        if not classified.is_blank:
            if classified.kind == DATA_CLOSE and classified.indent == indent:
                source.pull()
                return DataBlock(text="\n".join(collected), terminated=True)
            if classified.indent < indent:
                break

        source.pull()
        collected.append(dedent(line.text, indent))

    # Blank lines swallowed before the end are not part of the payload.
    while collected and not collected[-1].strip():
        collected.pop()
    return DataBlock(text="\n".join(collected), terminated=False)
