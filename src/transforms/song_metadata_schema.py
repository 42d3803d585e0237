"""Versioned binary schema for packed song metadata.

The schema travels inside every packed payload as Arrow schema metadata,
so readers of the songs table can decode cells without this job's code.
Changing a field, its type, or its order requires a new version.
"""

from __future__ import annotations

from dataclasses import dataclass

import pyarrow as pa

SCHEMA_NAME_KEY = b"songbulk.schema.name"
SCHEMA_NAMESPACE_KEY = b"songbulk.schema.namespace"
SCHEMA_VERSION_KEY = b"songbulk.schema.version"


@dataclass(frozen=True)
class RecordSchema:
    """Named, versioned record layout.

    Attributes:
        name: Record name.
        namespace: Record namespace.
        version: Schema version, bumped on any layout change.
        arrow_schema: Field names, types and order, with identity metadata.
    """

    name: str
    namespace: str
    version: int
    arrow_schema: pa.Schema

    @property
    def full_name(self) -> str:
        """Namespace-qualified record name."""
        return f"{self.namespace}.{self.name}"

    @property
    def field_names(self) -> tuple[str, ...]:
        """Field names in declared order."""
        return tuple(self.arrow_schema.names)


def build_record_schema(
    name: str,
    namespace: str,
    version: int,
    fields: list[pa.Field],
) -> RecordSchema:
    """Build a record schema with identity metadata attached.

    Args:
        name: Record name.
        namespace: Record namespace.
        version: Schema version.
        fields: Ordered Arrow fields.

    Returns:
        Versioned record schema.
    """
    arrow_schema = pa.schema(
        fields,
        metadata={
            SCHEMA_NAME_KEY: name.encode("utf-8"),
            SCHEMA_NAMESPACE_KEY: namespace.encode("utf-8"),
            SCHEMA_VERSION_KEY: str(version).encode("utf-8"),
        },
    )
    return RecordSchema(name=name, namespace=namespace, version=version, arrow_schema=arrow_schema)


SONG_METADATA_SCHEMA = build_record_schema(
    name="SongMetadata",
    namespace="songbulk.music",
    version=1,
    fields=[
        pa.field("song_name", pa.string(), nullable=False),
        pa.field("album_name", pa.string(), nullable=False),
        pa.field("artist_name", pa.string(), nullable=False),
        pa.field("genre", pa.string(), nullable=False),
        pa.field("tempo", pa.int64(), nullable=False),
        pa.field("duration", pa.int64(), nullable=False),
    ],
)
