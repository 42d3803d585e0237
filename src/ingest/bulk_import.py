"""Bulk import orchestration.

This module composes parse, row key derivation, packing and sorted
emission into shard tasks, runs the tasks, and records the job manifest.
Shard tasks share no state; a failed task leaves no artifact and is
re-run from scratch by whoever scheduled it.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from core.config import SongbulkConfig
from core.constants import METADATA_COLUMN, SHARD_FILE_PREFIX, SHARD_FILE_SUFFIX
from core.errors import SongbulkConfigError, SongbulkParseError
from core.logging_config import get_logger
from core.table_uri import TableLocation, parse_table_uri
from core.types import (
    BulkImportOptions,
    BulkImportResult,
    InputShard,
    RawRecord,
    RejectedRecord,
    ShardResult,
)
from ingest.input_reader import read_raw_records
from ingest.shard_planner import plan_shards
from store.cell_emitter import SortedCellEmitter
from store.cell_file_writer import CellFileWriter, ParquetCellFileWriter
from store.job_manifest import write_job_manifest
from transforms.metadata_packer import pack_metadata
from transforms.record_parser import parse_song_record
from transforms.row_key import derive_row_key
from transforms.song_metadata_schema import SONG_METADATA_SCHEMA, RecordSchema

_LOGGER = get_logger(__name__)


class BulkImportRunner:
    """Runs one bulk import job over all input shards."""

    def __init__(
        self,
        options: BulkImportOptions,
        config: SongbulkConfig,
        writer: CellFileWriter | None = None,
        schema: RecordSchema = SONG_METADATA_SCHEMA,
    ) -> None:
        _validate_options(options)
        self._options = options
        self._config = config
        self._table = parse_table_uri(options.table_uri)
        self._writer = writer or ParquetCellFileWriter()
        self._schema = schema
        self._output_dir = Path(options.output_dir).expanduser().resolve()

    def run(self) -> BulkImportResult:
        """Execute the job and return per-shard outcomes."""
        _prepare_output_dir(self._output_dir)
        records = read_raw_records(self._options.input_uri, self._config)
        shards = plan_shards(records, self._options.shard_size)
        shard_results = self._run_shards(shards)
        manifest_path = write_job_manifest(
            self._output_dir, self._options, self._schema, shard_results
        )
        result = BulkImportResult(
            table_uri=self._table.uri,
            output_dir=self._output_dir,
            manifest_path=manifest_path,
            shards=shard_results,
        )
        _LOGGER.info(
            "bulk_import_completed",
            table_uri=result.table_uri,
            input_uri=self._options.input_uri,
            output_dir=str(result.output_dir),
            shard_count=len(shard_results),
            input_count=len(records),
            cell_count=result.cell_count,
            rejected_count=result.rejected_count,
        )
        return result

    def _run_shards(self, shards: list[InputShard]) -> tuple[ShardResult, ...]:
        if self._options.max_workers == 1 or len(shards) <= 1:
            return tuple(self._run_one(shard) for shard in shards)
        with ThreadPoolExecutor(max_workers=self._options.max_workers) as executor:
            return tuple(executor.map(self._run_one, shards))

    def _run_one(self, shard: InputShard) -> ShardResult:
        return run_shard_task(
            shard,
            self._output_dir,
            self._table,
            writer=self._writer,
            strict=self._options.strict,
            schema=self._schema,
        )


def run_bulk_import(
    options: BulkImportOptions,
    config: SongbulkConfig,
    writer: CellFileWriter | None = None,
) -> BulkImportResult:
    """Convert song metadata input into sorted bulk-load files.

    Args:
        options: Job parameters.
        config: Runtime configuration.
        writer: Optional bulk file writer, Parquet by default.

    Returns:
        Job result with one entry per shard and the manifest path.

    Raises:
        SongbulkConfigError: If the table URI, options or output directory are invalid.
        SongbulkIngestError: If input cannot be read.
        SongbulkParseError: In strict mode, for the first bad record.
        SchemaPackError: If a record cannot be packed.
        SongbulkEmitError: If a shard file cannot be written.
    """
    return BulkImportRunner(options, config, writer=writer).run()


def run_shard_task(
    shard: InputShard,
    output_dir: Path,
    table: TableLocation,
    writer: CellFileWriter,
    strict: bool = False,
    schema: RecordSchema = SONG_METADATA_SCHEMA,
) -> ShardResult:
    """Transform one shard into one sorted bulk-load file.

    Args:
        shard: Input shard.
        output_dir: Directory receiving the shard file.
        table: Target table, recorded in file metadata.
        writer: Bulk file writer.
        strict: Raise on the first bad record instead of dropping it.
        schema: Schema used to pack cell values.

    Returns:
        Shard outcome.

    Raises:
        SongbulkParseError: In strict mode, for the first bad record.
        SchemaPackError: If a record cannot be packed.
        SongbulkEmitError: If the shard file cannot be written.
    """
    emitter = SortedCellEmitter(
        output_dir / shard_file_name(shard.shard_id),
        writer,
        file_metadata=_shard_file_metadata(shard, table, schema),
    )
    rejected: list[RejectedRecord] = []
    for record in shard.records:
        fields = parse_song_record(record.text)
        if isinstance(fields, SongbulkParseError):
            rejected.append(_reject_record(record, fields, strict))
            if strict:
                raise fields
            continue
        emitter.emit(derive_row_key(fields), METADATA_COLUMN, pack_metadata(fields, schema))
    output_path = emitter.finalize()
    accepted_count = len(shard.records) - len(rejected)
    result = ShardResult(
        shard_id=shard.shard_id,
        source_uri=shard.source_uri,
        output_path=output_path,
        input_count=len(shard.records),
        accepted_count=accepted_count,
        cell_count=accepted_count - len(emitter.duplicates),
        rejected=tuple(rejected),
        duplicate_keys=tuple(duplicate.row_key for duplicate in emitter.duplicates),
    )
    _LOGGER.info(
        "shard_completed",
        shard_id=result.shard_id,
        source_uri=result.source_uri,
        output_path=str(result.output_path),
        input_count=result.input_count,
        cell_count=result.cell_count,
        rejected_count=len(result.rejected),
        duplicate_key_count=len(result.duplicate_keys),
    )
    return result


def shard_file_name(shard_id: int) -> str:
    """Return the bulk-load file name for a shard."""
    return f"{SHARD_FILE_PREFIX}{shard_id:05d}{SHARD_FILE_SUFFIX}"


def _reject_record(record: RawRecord, error: SongbulkParseError, strict: bool) -> RejectedRecord:
    rejected = RejectedRecord(
        source_uri=record.source_uri,
        line_number=record.line_number,
        error_kind=error.error_kind,
        field_name=error.field_name,
        message=str(error),
    )
    log = _LOGGER.error if strict else _LOGGER.warning
    log(
        "record_rejected",
        source_uri=rejected.source_uri,
        line_number=rejected.line_number,
        error_kind=rejected.error_kind,
        field_name=rejected.field_name,
        message=rejected.message,
    )
    return rejected


def _shard_file_metadata(
    shard: InputShard,
    table: TableLocation,
    schema: RecordSchema,
) -> dict[str, str]:
    return {
        "table_uri": table.uri,
        "column": METADATA_COLUMN,
        "value_schema": schema.full_name,
        "value_schema_version": str(schema.version),
        "shard_id": str(shard.shard_id),
        "source_uri": shard.source_uri,
    }


def _validate_options(options: BulkImportOptions) -> None:
    if options.shard_size < 0:
        raise SongbulkConfigError(
            f"Invalid shard size {options.shard_size}: use 0 or a positive record count."
        )
    if options.max_workers < 1:
        raise SongbulkConfigError(
            f"Invalid max workers {options.max_workers}: run at least one shard task."
        )


def _prepare_output_dir(output_dir: Path) -> None:
    if output_dir.exists() and (not output_dir.is_dir() or any(output_dir.iterdir())):
        raise SongbulkConfigError(
            f"Output directory {output_dir} already exists and is not empty. "
            "Bulk-load output must go to a fresh directory."
        )
    output_dir.mkdir(parents=True, exist_ok=True)
