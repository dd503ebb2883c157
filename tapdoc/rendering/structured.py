"""Structured (JSON / YAML) representation of a parsed document.

The representation mirrors the document tree: one dict per document with
its plan, status and entries, each entry tagged with a ``type`` field.
Data blocks stay raw text unless ``decode_yaml`` is set, in which case
they are loaded with PyYAML and fall back to the raw text when the block
is not valid YAML.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TextIO

import yaml

from tapdoc.model import (
    BailOut,
    Condition,
    Diagnostic,
    Document,
    Entry,
    Plan,
    Pragma,
    TestPoint,
    UnknownLine,
)


def _decode_data_block(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        return text


def _condition_to_dict(condition: Condition) -> dict[str, Any]:
    return {
        "kind": condition.kind,
        "message": condition.message,
        "line": condition.line,
    }


def _plan_to_dict(plan: Plan) -> dict[str, Any]:
    result: dict[str, Any] = {
        "start": plan.start,
        "end": plan.end,
        "skip_reason": plan.skip_reason,
        "trailing": plan.trailing,
    }
    if plan.comment is not None:
        result["comment"] = plan.comment
    return result


def _test_point_to_dict(point: TestPoint, decode_yaml: bool) -> dict[str, Any]:
    result: dict[str, Any] = {
        "type": "test_point",
        "line": point.line,
        "ok": point.ok,
        "number": point.number,
        "position": point.position,
        "description": point.description,
        "directive": None,
    }
    if point.directive is not None:
        result["directive"] = {
            "kind": point.directive.kind,
            "reason": point.directive.reason,
        }
    if point.data_block is not None:
        result["data_block"] = (
            _decode_data_block(point.data_block) if decode_yaml else point.data_block
        )
    if point.subtest is not None:
        result["subtest"] = document_to_dict(point.subtest, decode_yaml=decode_yaml)
    if point.conditions:
        result["conditions"] = [_condition_to_dict(c) for c in point.conditions]
    return result


def entry_to_dict(entry: Entry, decode_yaml: bool = False) -> dict[str, Any]:
    """Convert one document entry to a tagged dict."""
    if isinstance(entry, TestPoint):
        return _test_point_to_dict(entry, decode_yaml)
    if isinstance(entry, Diagnostic):
        return {"type": "diagnostic", "line": entry.line, "text": entry.text}
    if isinstance(entry, BailOut):
        return {"type": "bail_out", "line": entry.line, "reason": entry.reason}
    if isinstance(entry, Pragma):
        return {
            "type": "pragma", "line": entry.line,
            "name": entry.name, "enabled": entry.enabled,
        }
    if isinstance(entry, UnknownLine):
        return {"type": "unknown", "line": entry.line, "text": entry.text}
    raise TypeError(f"Unsupported entry type: {type(entry).__name__}")


def document_to_dict(document: Document, decode_yaml: bool = False) -> dict[str, Any]:
    """Convert a document (and its subtests) to plain Python data."""
    return {
        "name": document.name,
        "version": document.version,
        "plan": _plan_to_dict(document.plan) if document.plan is not None else None,
        "status": document.status,
        "bail_out": document.bail_out.reason if document.bail_out is not None else None,
        "summary": {
            "expected": document.expected_count,
            "actual": document.actual_count,
            "plan_mismatch": document.has_plan_mismatch,
            "failures": len(document.failures),
            "skipped": len(document.skipped),
            "todo": len(document.todos),
            "passing": document.is_passing,
        },
        "entries": [entry_to_dict(e, decode_yaml) for e in document.entries],
        "conditions": [_condition_to_dict(c) for c in document.conditions],
    }


def render_json(
    document: Document, indent: int | None = 2, decode_yaml: bool = False,
) -> str:
    return json.dumps(
        document_to_dict(document, decode_yaml=decode_yaml),
        indent=indent,
        default=str,
    )


def render_yaml(document: Document, decode_yaml: bool = False) -> str:
    return yaml.dump(
        document_to_dict(document, decode_yaml=decode_yaml),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def _write(text: str, out: Path | TextIO) -> None:
    if isinstance(out, Path):
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        out.write(text)


def write_json(
    document: Document,
    out: Path | TextIO,
    indent: int | None = 2,
    decode_yaml: bool = False,
) -> None:
    """Write the JSON representation to a path or an open text stream."""
    _write(render_json(document, indent=indent, decode_yaml=decode_yaml) + "\n", out)


def write_yaml(
    document: Document,
    out: Path | TextIO,
    decode_yaml: bool = False,
) -> None:
    """Write the YAML representation to a path or an open text stream."""
    _write(render_yaml(document, decode_yaml=decode_yaml), out)
