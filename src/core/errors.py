"""Songbulk exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SongbulkError(Exception):
    """Base exception for all songbulk failures."""


class SongbulkConfigError(SongbulkError):
    """Raised for invalid runtime configuration."""


class SongbulkIngestError(SongbulkError):
    """Raised when input sources cannot be read."""


class SongbulkParseError(SongbulkError):
    """Raised or returned for malformed records and missing fields.

    Attributes:
        field_name: Offending field, or ``None`` for syntax failures.
    """

    error_kind = "parse_error"

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class InvalidNumericFieldError(SongbulkParseError):
    """Raised or returned when tempo or duration is not a 64-bit integer."""

    error_kind = "invalid_numeric_field"


class SchemaPackError(SongbulkError):
    """Raised when a record cannot be packed or decoded against its schema."""


class DuplicateKeyError(SongbulkError):
    """Recorded when two cells in one shard share a row key and column.

    Attributes:
        row_key: Colliding row key.
        column: Colliding column identifier.
    """

    def __init__(self, row_key: bytes, column: str) -> None:
        super().__init__(
            f"Duplicate cell for row key {row_key!r} column '{column}': "
            "keeping the last emitted value."
        )
        self.row_key = row_key
        self.column = column


class SongbulkEmitError(SongbulkError):
    """Raised for sorted output ordering and writer failures."""


class SongbulkDependencyError(SongbulkError):
    """Raised when an optional runtime dependency is missing."""


class SongbulkJobSpecError(SongbulkError):
    """Raised for invalid or unsupported YAML job files."""
