"""Error kinds raised by autodash.

The heuristic pipeline itself narrows silently (an unmatched dimension or a
denied query just produces no candidate). These exceptions are reserved for
collaborators the pipeline cannot recover from.
"""

from __future__ import annotations

from typing import Any


class AutodashError(Exception):
    """Base exception for autodash failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.details = details or {}


class MetadataUnavailable(AutodashError):
    """The metadata store could not supply a table or field."""


class InvalidRuleDefinition(AutodashError):
    """A rule file could not be parsed into a valid rule."""

    def __init__(self, message: str, source: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message, details)
        self.source = source


class InvalidConfiguration(AutodashError):
    """An ``AD_*`` environment variable holds a value that cannot be used."""
