"""Shared fixture helpers for tests."""

from __future__ import annotations

import json
from pathlib import Path

from core.types import InputShard, RawRecord

SONG_1_LINE = (
    '{"song_id":"song-1","song_name":"A","album_name":"B","artist_name":"C",'
    '"genre":"D","tempo":"120","duration":"240"}'
)


def fixture_path(relative_path: str) -> Path:
    """Resolve a fixture path relative to tests/fixtures.

    Args:
        relative_path: Path under fixtures root.

    Returns:
        Absolute fixture path.
    """
    tests_root = Path(__file__).resolve().parent
    return tests_root / "fixtures" / relative_path


def song_line(song_id: str, /, **overrides: object) -> str:
    """Build one JSON input line; an override of ``None`` drops the field."""
    fields: dict[str, object] = {
        "song_id": song_id,
        "song_name": f"name-{song_id}",
        "album_name": "album",
        "artist_name": "artist",
        "genre": "rock",
        "tempo": "120",
        "duration": "240",
    }
    fields.update(overrides)
    return json.dumps({key: value for key, value in fields.items() if value is not None})


def make_shard(lines: list[str], shard_id: int = 0, source_uri: str = "memory.json") -> InputShard:
    """Wrap raw lines into an input shard."""
    records = tuple(
        RawRecord(source_uri=source_uri, line_number=index, text=line)
        for index, line in enumerate(lines, 1)
    )
    return InputShard(shard_id=shard_id, source_uri=source_uri, records=records)
