"""Job manifest persistence.

This module records which bulk-load files a job produced, the table
they target, and every input line the parser rejected.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from core.constants import JOB_MANIFEST_FILE_NAME
from core.errors import SongbulkEmitError
from core.types import BulkImportOptions, ShardResult
from transforms.song_metadata_schema import RecordSchema


def write_job_manifest(
    output_dir: Path,
    options: BulkImportOptions,
    schema: RecordSchema,
    shard_results: tuple[ShardResult, ...],
) -> Path:
    """Write the job manifest next to the shard files.

    Args:
        output_dir: Job output directory.
        options: Job parameters.
        schema: Schema the cell values were packed with.
        shard_results: Completed shard outcomes in shard order.

    Returns:
        Manifest file path.

    Raises:
        SongbulkEmitError: If the manifest cannot be written.
    """
    manifest = {
        "table_uri": options.table_uri,
        "input_uri": options.input_uri,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "strict": options.strict,
        "value_schema": {"name": schema.full_name, "version": schema.version},
        "shards": [_shard_payload(result) for result in shard_results],
    }
    manifest_path = output_dir / JOB_MANIFEST_FILE_NAME
    try:
        manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    except OSError as error:
        raise SongbulkEmitError(
            f"Failed to write job manifest at {manifest_path}: {error}."
        ) from error
    return manifest_path


def read_job_manifest(manifest_path: Path) -> dict[str, Any]:
    """Read a job manifest.

    Raises:
        SongbulkEmitError: If the manifest is missing or not a JSON object.
    """
    try:
        payload = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise SongbulkEmitError(
            f"Failed to read job manifest at {manifest_path}: {error}."
        ) from error
    if not isinstance(payload, dict):
        raise SongbulkEmitError(f"Job manifest at {manifest_path} must be a JSON object.")
    return payload


def _shard_payload(result: ShardResult) -> dict[str, object]:
    return {
        "shard_id": result.shard_id,
        "source_uri": result.source_uri,
        "file": result.output_path.name,
        "input_count": result.input_count,
        "accepted_count": result.accepted_count,
        "cell_count": result.cell_count,
        "duplicate_key_count": len(result.duplicate_keys),
        "rejected": [asdict(rejected) for rejected in result.rejected],
    }
