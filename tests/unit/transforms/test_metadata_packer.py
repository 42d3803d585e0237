"""Unit tests for metadata packing against the versioned schema."""

from __future__ import annotations

from dataclasses import asdict

import pyarrow as pa
import pytest

from core.errors import SchemaPackError
from core.types import MetadataRecord, ParsedFields
from tests.fixture_paths import SONG_1_LINE
from transforms.metadata_packer import (
    build_metadata_record,
    pack_metadata,
    pack_record,
    unpack_metadata,
)
from transforms.record_parser import parse_song_record
from transforms.song_metadata_schema import SONG_METADATA_SCHEMA, build_record_schema


def _parsed_song_1() -> ParsedFields:
    fields = parse_song_record(SONG_1_LINE)
    assert isinstance(fields, ParsedFields)
    return fields


def test_pack_metadata_round_trips_parsed_fields() -> None:
    """Decoding a packed payload should give back the parsed values."""
    payload = pack_metadata(_parsed_song_1())

    record = unpack_metadata(payload)

    assert asdict(record) == {
        "song_name": "A",
        "album_name": "B",
        "artist_name": "C",
        "genre": "D",
        "tempo": 120,
        "duration": 240,
    }


def test_pack_metadata_is_deterministic() -> None:
    """Equal fields should pack to identical bytes."""
    assert pack_metadata(_parsed_song_1()) == pack_metadata(_parsed_song_1())


def test_build_metadata_record_drops_song_id() -> None:
    """The row key is not repeated inside the value."""
    record = build_metadata_record(_parsed_song_1())

    assert "song_id" not in asdict(record)


def test_payload_embeds_schema_identity() -> None:
    """Payloads should be readable with plain pyarrow and carry the version."""
    payload = pack_metadata(_parsed_song_1())

    schema = pa.ipc.open_stream(pa.BufferReader(payload)).schema

    assert schema.names == list(SONG_METADATA_SCHEMA.field_names)
    assert schema.field("tempo").type == pa.int64()
    assert schema.metadata[b"songbulk.schema.version"] == b"1"
    assert schema.metadata[b"songbulk.schema.name"] == b"SongMetadata"


def test_pack_record_rejects_out_of_range_integer() -> None:
    """A value that does not fit int64 is a pack error."""
    record = MetadataRecord(
        song_name="A", album_name="B", artist_name="C", genre="D", tempo=2**63, duration=1
    )

    with pytest.raises(SchemaPackError):
        pack_record(record)


def test_pack_record_rejects_mismatched_schema_fields() -> None:
    """Packing against a schema with other fields should fail."""
    other_schema = build_record_schema(
        name="Other",
        namespace="test",
        version=1,
        fields=[pa.field("title", pa.string())],
    )

    with pytest.raises(SchemaPackError):
        pack_metadata(_parsed_song_1(), other_schema)


def test_unpack_metadata_rejects_other_schema_version() -> None:
    """A payload written with another version must not decode silently."""
    version_two = build_record_schema(
        name=SONG_METADATA_SCHEMA.name,
        namespace=SONG_METADATA_SCHEMA.namespace,
        version=2,
        fields=list(SONG_METADATA_SCHEMA.arrow_schema),
    )
    payload = pack_metadata(_parsed_song_1(), version_two)

    with pytest.raises(SchemaPackError, match="version 2"):
        unpack_metadata(payload)


def test_unpack_metadata_rejects_corrupt_payload() -> None:
    """Garbage bytes should raise a pack error."""
    with pytest.raises(SchemaPackError):
        unpack_metadata(b"not an arrow stream")
