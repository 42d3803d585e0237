"""Unit tests for row key derivation."""

from __future__ import annotations

from core.types import ParsedFields
from transforms.row_key import derive_row_key


def _fields(song_id: str) -> ParsedFields:
    return ParsedFields(
        song_id=song_id,
        song_name="n",
        album_name="a",
        artist_name="r",
        genre="g",
        tempo=1,
        duration=2,
    )


def test_derive_row_key_is_song_id_bytes() -> None:
    """Row key should be the UTF-8 song id with no transformation."""
    assert derive_row_key(_fields("song-1")) == b"song-1"


def test_derive_row_key_is_injective_over_distinct_ids() -> None:
    """Distinct song ids should never share a row key."""
    song_ids = ["song-1", "song-10", "song-2", "Song-1", "sóng-1", "song-1 ", ""]

    keys = {derive_row_key(_fields(song_id)) for song_id in song_ids}

    assert len(keys) == len(song_ids)


def test_derive_row_key_preserves_id_ordering() -> None:
    """Byte order of keys should match code point order of ids."""
    song_ids = ["z", "é", "a", "song-2", "song-10", "\U0001f3b5", "\uffff"]

    keys = [derive_row_key(_fields(song_id)) for song_id in song_ids]

    assert sorted(keys) == [song_id.encode("utf-8") for song_id in sorted(song_ids)]
