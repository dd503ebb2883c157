"""Parser and renderer configuration file management.

Reads and writes the optional ``.tapdoc.json`` file holding the subtest
nesting limit and rendering preferences used by the command-line tool.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tapdoc.parsing.builder import DEFAULT_MAX_DEPTH

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "max_depth": DEFAULT_MAX_DEPTH,
    "decode_yaml": False,
    "indent_json": 2,
}


class ParserConfig:
    """Manages the .tapdoc.json configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text()
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError):
            self._data = dict(DEFAULT_CONFIG)

    def save(self) -> None:
        """Write config to the file."""
        if self.path is None:
            raise ValueError("No config file path specified")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2)
            f.write("\n")

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def max_depth(self) -> int | None:
        """Get the subtest nesting limit (None = unlimited)."""
        val = self._data.get("max_depth", DEFAULT_CONFIG["max_depth"])
        return int(val) if val is not None else None

    @property
    def decode_yaml(self) -> bool:
        """Whether renderers decode data blocks as YAML."""
        return bool(self._data.get("decode_yaml", DEFAULT_CONFIG["decode_yaml"]))

    @property
    def indent_json(self) -> int | None:
        """Get the JSON indentation width (None = compact)."""
        val = self._data.get("indent_json", DEFAULT_CONFIG["indent_json"])
        return int(val) if val is not None else None

    def set_config(
        self,
        max_depth: int | None = None,
        decode_yaml: bool | None = None,
        indent_json: int | None = None,
    ) -> None:
        """Update configuration values."""
        if max_depth is not None:
            self._data["max_depth"] = max_depth
        if decode_yaml is not None:
            self._data["decode_yaml"] = decode_yaml
        if indent_json is not None:
            self._data["indent_json"] = indent_json
