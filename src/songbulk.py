"""Public SDK surface for songbulk.

This module provides a stable import path for job drivers.
It re-exports the bulk import entry point, pipeline stages and typed models.
"""

from __future__ import annotations

from core.config import SongbulkConfig
from core.job_spec import load_job_spec
from core.types import BulkImportOptions, BulkImportResult, MetadataRecord, ParsedFields
from ingest.bulk_import import run_bulk_import, run_shard_task
from store.cell_emitter import SortedCellEmitter
from store.cell_file_writer import CellFileWriter, ParquetCellFileWriter, read_cell_file
from transforms.metadata_packer import pack_metadata, unpack_metadata
from transforms.record_parser import parse_song_record
from transforms.row_key import derive_row_key
from transforms.song_metadata_schema import SONG_METADATA_SCHEMA

__all__ = [
    "BulkImportOptions",
    "BulkImportResult",
    "CellFileWriter",
    "MetadataRecord",
    "ParquetCellFileWriter",
    "ParsedFields",
    "SONG_METADATA_SCHEMA",
    "SongbulkConfig",
    "SortedCellEmitter",
    "derive_row_key",
    "load_job_spec",
    "pack_metadata",
    "parse_song_record",
    "read_cell_file",
    "run_bulk_import",
    "run_shard_task",
    "unpack_metadata",
]
