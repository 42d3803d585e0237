"""Song metadata packing transform.

This module packs parsed song fields into the versioned binary schema
and decodes packed payloads back for verification and inspection.
Payloads are single-row Arrow IPC streams, so the schema is embedded
with every value.
"""

from __future__ import annotations

from dataclasses import asdict

import pyarrow as pa

from core.errors import SchemaPackError
from core.types import MetadataRecord, ParsedFields
from transforms.song_metadata_schema import (
    SCHEMA_VERSION_KEY,
    SONG_METADATA_SCHEMA,
    RecordSchema,
)

_ARROW_FAILURES = (pa.ArrowException, OverflowError, TypeError, ValueError)


def build_metadata_record(fields: ParsedFields) -> MetadataRecord:
    """Copy the packed subset of parsed fields into a metadata record.

    Args:
        fields: Parsed song fields.

    Returns:
        Metadata record without the row-addressing song id.
    """
    return MetadataRecord(
        song_name=fields.song_name,
        album_name=fields.album_name,
        artist_name=fields.artist_name,
        genre=fields.genre,
        tempo=fields.tempo,
        duration=fields.duration,
    )


def pack_metadata(fields: ParsedFields, schema: RecordSchema = SONG_METADATA_SCHEMA) -> bytes:
    """Pack parsed song fields into schema-tagged bytes.

    Args:
        fields: Parsed song fields.
        schema: Record schema to pack against.

    Returns:
        Serialized payload.

    Raises:
        SchemaPackError: If the record does not fit the schema.
    """
    return pack_record(build_metadata_record(fields), schema)


def pack_record(record: MetadataRecord, schema: RecordSchema = SONG_METADATA_SCHEMA) -> bytes:
    """Serialize a metadata record as a one-row Arrow IPC stream.

    Args:
        record: Metadata record.
        schema: Record schema to pack against.

    Returns:
        Serialized payload.

    Raises:
        SchemaPackError: If field names differ from the schema or a value
            cannot be converted to its declared type.
    """
    row = asdict(record)
    if tuple(row) != schema.field_names:
        raise SchemaPackError(
            f"Cannot pack {type(record).__name__} as {schema.full_name} v{schema.version}: "
            f"fields {tuple(row)} do not match schema fields {schema.field_names}."
        )
    sink = pa.BufferOutputStream()
    try:
        batch = pa.RecordBatch.from_pylist([row], schema=schema.arrow_schema)
        with pa.ipc.new_stream(sink, schema.arrow_schema) as writer:
            writer.write_batch(batch)
    except _ARROW_FAILURES as error:
        raise SchemaPackError(
            f"Failed to pack record as {schema.full_name} v{schema.version}: {error}."
        ) from error
    return sink.getvalue().to_pybytes()


def unpack_metadata(payload: bytes, schema: RecordSchema = SONG_METADATA_SCHEMA) -> MetadataRecord:
    """Decode a packed payload and check it against the declared schema.

    Args:
        payload: Serialized payload produced by ``pack_record``.
        schema: Expected record schema.

    Returns:
        Decoded metadata record.

    Raises:
        SchemaPackError: If the payload is corrupt, was written with another
            schema or version, or does not hold exactly one record.
    """
    try:
        reader = pa.ipc.open_stream(pa.BufferReader(payload))
        table = reader.read_all()
    except _ARROW_FAILURES as error:
        raise SchemaPackError(f"Failed to decode {schema.full_name} payload: {error}.") from error
    if not table.schema.equals(schema.arrow_schema, check_metadata=True):
        embedded_version = (table.schema.metadata or {}).get(SCHEMA_VERSION_KEY, b"?")
        raise SchemaPackError(
            f"Payload schema (version {embedded_version.decode('utf-8', 'replace')}) does not "
            f"match {schema.full_name} v{schema.version}. "
            "Decode with the schema it was written with."
        )
    rows = table.to_pylist()
    if len(rows) != 1:
        raise SchemaPackError(
            f"Expected one {schema.full_name} record per payload, found {len(rows)}."
        )
    return MetadataRecord(**rows[0])
