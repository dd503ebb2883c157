"""Command-line tool for parsing and rendering TAP files."""
