"""Errors raised while filtering review threads.

Every failure the CLI reports is a ThreadFilterError, so the CLI can turn
them into a single exit status without knowing the individual kinds.
"""

from __future__ import annotations


class ThreadFilterError(Exception):
    """Base class for all filtering failures."""


class InputReadError(ThreadFilterError):
    """The input file could not be read (missing, permission denied, ...)."""


class InputParseError(ThreadFilterError):
    """The input file is not valid JSON."""


class SchemaError(ThreadFilterError):
    """A field the GraphQL response must carry is missing or has the wrong type."""

    def __init__(self, path: str, problem: str = "is missing"):
        self.path = path
        super().__init__(f"Field '{path}' {problem}")


class OutputWriteError(ThreadFilterError):
    """The output file or its parent directory could not be written."""


class ConfigError(ThreadFilterError):
    """The configuration file is unreadable or malformed."""
