"""TAP tool entry point with rendering and corpus replay subcommands.

Provides json, yaml, and dump subcommands that parse a single TAP file
and render the resulting document, plus a replay subcommand that parses
every file below a corpus directory to check that the parser accepts them.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from tapdoc.config import ParserConfig
from tapdoc.model import Document
from tapdoc.parsing import parse_file
from tapdoc.rendering import dump_document, write_json, write_yaml


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "file",
        type=Path,
        help="Path to the TAP file to parse",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to the .tapdoc.json config file",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum subtest nesting depth (overrides the config file)",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Parse Test Anything Protocol output into a structured document"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # json subcommand
    json_parser = subparsers.add_parser(
        "json",
        help="Render the parsed document as JSON",
    )
    _add_render_arguments(json_parser)
    json_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the JSON file (default: stdout)",
    )
    json_parser.add_argument(
        "--decode-yaml",
        action="store_true",
        default=False,
        help="Decode data blocks as YAML instead of keeping raw text",
    )

    # yaml subcommand
    yaml_parser = subparsers.add_parser(
        "yaml",
        help="Render the parsed document as YAML",
    )
    _add_render_arguments(yaml_parser)
    yaml_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the YAML file (default: stdout)",
    )
    yaml_parser.add_argument(
        "--decode-yaml",
        action="store_true",
        default=False,
        help="Decode data blocks as YAML instead of keeping raw text",
    )

    # dump subcommand
    dump_parser = subparsers.add_parser(
        "dump",
        help="Print a line-by-line debug dump of the parsed document",
    )
    _add_render_arguments(dump_parser)

    # replay subcommand
    replay_parser = subparsers.add_parser(
        "replay",
        help="Parse every file in a corpus directory",
    )
    replay_parser.add_argument(
        "corpus",
        type=Path,
        help="Directory containing TAP files (searched recursively)",
    )
    replay_parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum subtest nesting depth (overrides the config file)",
    )
    replay_parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to the .tapdoc.json config file",
    )
    replay_parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print one line per file with its status and condition count",
    )

    return parser.parse_args(argv)


def _load_config(args: argparse.Namespace) -> ParserConfig:
    cfg = ParserConfig(args.config_file)
    if args.max_depth is not None:
        cfg.set_config(max_depth=args.max_depth)
    if getattr(args, "decode_yaml", False):
        cfg.set_config(decode_yaml=True)
    return cfg


def _checked_max_depth(cfg: ParserConfig) -> int | None:
    """Return the configured nesting limit.

    Raises:
        ValueError: If the value is not a non-negative integer or null.
    """
    try:
        max_depth = cfg.max_depth
    except (TypeError, ValueError):
        raise ValueError(
            f"max_depth must be an integer, got {cfg.config.get('max_depth')!r}"
        ) from None
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")
    return max_depth


def _read_document(path: Path, cfg: ParserConfig) -> Document | None:
    """Parse ``path``, reporting configuration and read failures on stderr."""
    try:
        max_depth = _checked_max_depth(cfg)
    except ValueError as exc:
        print(f"tap-tool: invalid configuration: {exc}", file=sys.stderr)
        return None
    try:
        return parse_file(path, max_depth=max_depth)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"tap-tool: cannot read {path}: {exc}", file=sys.stderr)
        return None


def cmd_json(args: argparse.Namespace) -> int:
    """Handle json subcommand.

    Returns:
        Exit code (0 for success, 1 if the file cannot be read or the
        configuration is invalid).
    """
    cfg = _load_config(args)
    document = _read_document(args.file, cfg)
    if document is None:
        return 1
    write_json(
        document,
        args.output if args.output is not None else sys.stdout,
        indent=cfg.indent_json,
        decode_yaml=cfg.decode_yaml,
    )
    if args.output is not None:
        print(f"Wrote {args.output}", file=sys.stderr)
    return 0


def cmd_yaml(args: argparse.Namespace) -> int:
    """Handle yaml subcommand.

    Returns:
        Exit code (0 for success, 1 if the file cannot be read or the
        configuration is invalid).
    """
    cfg = _load_config(args)
    document = _read_document(args.file, cfg)
    if document is None:
        return 1
    write_yaml(
        document,
        args.output if args.output is not None else sys.stdout,
        decode_yaml=cfg.decode_yaml,
    )
    if args.output is not None:
        print(f"Wrote {args.output}", file=sys.stderr)
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    """Handle dump subcommand."""
    cfg = _load_config(args)
    document = _read_document(args.file, cfg)
    if document is None:
        return 1
    sys.stdout.write(dump_document(document))
    return 0


def cmd_replay(args: argparse.Namespace) -> int:
    """Handle replay subcommand.

    Parses every file below the corpus directory.  Parsing itself must
    never fail, so any exception other than a read error is reported as
    a parser failure.

    Returns:
        Exit code (0 if every file parsed, 1 otherwise or on invalid
        configuration).
    """
    if not args.corpus.is_dir():
        print(f"tap-tool: corpus directory not found: {args.corpus}", file=sys.stderr)
        return 1

    cfg = _load_config(args)
    try:
        max_depth = _checked_max_depth(cfg)
    except ValueError as exc:
        print(f"tap-tool: invalid configuration: {exc}", file=sys.stderr)
        return 1

    files = sorted(p for p in args.corpus.rglob("*") if p.is_file())
    failed: list[Path] = []

    for path in files:
        try:
            document = parse_file(path, max_depth=max_depth)
        except (OSError, UnicodeDecodeError) as exc:
            print(f"  {path}: cannot read: {exc}", file=sys.stderr)
            failed.append(path)
            continue
        except Exception as exc:
            print(
                f"  {path}: parser raised {type(exc).__name__}: {exc}",
                file=sys.stderr,
            )
            failed.append(path)
            continue

        if args.verbose:
            print(
                f"  {path}: {document.status}, "
                f"{len(document.all_conditions)} condition(s)"
            )

    print(f"Replayed {len(files)} file(s), {len(failed)} failed")
    if failed:
        print("\nREPLAY FAILURE", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return 1

    if args.command == "json":
        return cmd_json(args)
    elif args.command == "yaml":
        return cmd_yaml(args)
    elif args.command == "dump":
        return cmd_dump(args)
    elif args.command == "replay":
        return cmd_replay(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
