"""Shared typed models.

This module defines immutable data models used by ingest, transforms,
and store layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.constants import DEFAULT_MAX_WORKERS, DEFAULT_SHARD_SIZE


@dataclass(frozen=True)
class RawRecord:
    """One input line before parsing.

    Attributes:
        source_uri: Path or URI of the file the line came from.
        line_number: One-based line number inside the source.
        text: Raw line text.
    """

    source_uri: str
    line_number: int
    text: str


@dataclass(frozen=True)
class ParsedFields:
    """Typed fields decoded from one song metadata line.

    Attributes:
        song_id: Song identifier used for row addressing.
        song_name: Song title.
        album_name: Album title.
        artist_name: Artist name.
        genre: Genre label.
        tempo: Tempo in beats per minute.
        duration: Duration in seconds.
    """

    song_id: str
    song_name: str
    album_name: str
    artist_name: str
    genre: str
    tempo: int
    duration: int


@dataclass(frozen=True)
class MetadataRecord:
    """Packed song metadata payload in declared schema field order."""

    song_name: str
    album_name: str
    artist_name: str
    genre: str
    tempo: int
    duration: int


@dataclass(frozen=True)
class OutputCell:
    """One sorted output cell.

    Attributes:
        row_key: Opaque row key bytes.
        column: Column identifier, ``family:qualifier``.
        payload: Packed cell value.
    """

    row_key: bytes
    column: str
    payload: bytes


@dataclass(frozen=True)
class InputShard:
    """Disjoint slice of input processed by one shard task."""

    shard_id: int
    source_uri: str
    records: tuple[RawRecord, ...]


@dataclass(frozen=True)
class RejectedRecord:
    """Recorded signal for an input line dropped by the parser.

    Attributes:
        source_uri: Source file of the line.
        line_number: One-based line number.
        error_kind: ``parse_error`` or ``invalid_numeric_field``.
        field_name: Offending field, when known.
        message: Human-readable failure description.
    """

    source_uri: str
    line_number: int
    error_kind: str
    field_name: str | None
    message: str


@dataclass(frozen=True)
class BulkImportOptions:
    """Bulk import job parameters.

    Attributes:
        table_uri: Target table identifier, ``kiji://cluster/instance/table``.
        input_uri: Input file, directory, or ``s3://`` prefix.
        output_dir: Local directory receiving one file per shard.
        strict: Fail the shard on the first bad record instead of dropping it.
        shard_size: Maximum records per shard, ``0`` for one shard per file.
        max_workers: Number of shard tasks run concurrently.
    """

    table_uri: str
    input_uri: str
    output_dir: str
    strict: bool = False
    shard_size: int = DEFAULT_SHARD_SIZE
    max_workers: int = DEFAULT_MAX_WORKERS


@dataclass(frozen=True)
class ShardResult:
    """Outcome of one shard task.

    Attributes:
        shard_id: Shard index.
        source_uri: Source the shard was cut from.
        output_path: Written bulk-load file.
        input_count: Records read.
        accepted_count: Records that parsed and packed.
        cell_count: Cells written after duplicate collapse.
        rejected: Records dropped by the parser.
        duplicate_keys: Row keys resolved by last-writer-wins.
    """

    shard_id: int
    source_uri: str
    output_path: Path
    input_count: int
    accepted_count: int
    cell_count: int
    rejected: tuple[RejectedRecord, ...]
    duplicate_keys: tuple[bytes, ...]


@dataclass(frozen=True)
class BulkImportResult:
    """Aggregate outcome of a bulk import job."""

    table_uri: str
    output_dir: Path
    manifest_path: Path
    shards: tuple[ShardResult, ...]

    @property
    def cell_count(self) -> int:
        """Total cells written across shards."""
        return sum(shard.cell_count for shard in self.shards)

    @property
    def rejected_count(self) -> int:
        """Total records dropped across shards."""
        return sum(len(shard.rejected) for shard in self.shards)
