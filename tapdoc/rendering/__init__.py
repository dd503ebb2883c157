"""Document renderers: canonical TAP, JSON/YAML, and debug dumps."""

from tapdoc.rendering.canonical import render_lines, render_tap
from tapdoc.rendering.debug_dump import dump_document, dump_lines
from tapdoc.rendering.structured import (
    document_to_dict,
    render_json,
    render_yaml,
    write_json,
    write_yaml,
)

__all__ = [
    "document_to_dict",
    "dump_document",
    "dump_lines",
    "render_json",
    "render_lines",
    "render_tap",
    "render_yaml",
    "write_json",
    "write_yaml",
]
