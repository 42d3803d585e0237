"""Unit tests for job manifest persistence."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import SongbulkEmitError
from core.types import BulkImportOptions, RejectedRecord, ShardResult
from store.job_manifest import read_job_manifest, write_job_manifest
from transforms.song_metadata_schema import SONG_METADATA_SCHEMA


def test_write_job_manifest_records_shards_and_rejections(tmp_path: Path) -> None:
    """Manifest should list shard files and every rejected line."""
    options = BulkImportOptions(
        table_uri="kiji://.env/default/songs",
        input_uri="songs.json",
        output_dir=str(tmp_path),
    )
    rejected = RejectedRecord(
        source_uri="songs.json",
        line_number=3,
        error_kind="parse_error",
        field_name="genre",
        message="Record is missing required fields: genre.",
    )
    shard = ShardResult(
        shard_id=0,
        source_uri="songs.json",
        output_path=tmp_path / "part-00000.parquet",
        input_count=3,
        accepted_count=2,
        cell_count=1,
        rejected=(rejected,),
        duplicate_keys=(b"song-1",),
    )

    manifest_path = write_job_manifest(tmp_path, options, SONG_METADATA_SCHEMA, (shard,))
    manifest = read_job_manifest(manifest_path)

    assert manifest["table_uri"] == "kiji://.env/default/songs"
    assert manifest["value_schema"] == {"name": "songbulk.music.SongMetadata", "version": 1}
    assert manifest["shards"][0]["file"] == "part-00000.parquet"
    assert manifest["shards"][0]["duplicate_key_count"] == 1
    assert manifest["shards"][0]["rejected"][0]["field_name"] == "genre"


def test_read_job_manifest_raises_for_invalid_json(tmp_path: Path) -> None:
    """A corrupt manifest should raise the store error."""
    manifest_path = tmp_path / "_manifest.json"
    manifest_path.write_text("[1, 2", encoding="utf-8")

    with pytest.raises(SongbulkEmitError):
        read_job_manifest(manifest_path)
