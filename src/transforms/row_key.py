"""Row key derivation for the songs table."""

from __future__ import annotations

from core.constants import ROW_KEY_ENCODING
from core.types import ParsedFields


def derive_row_key(fields: ParsedFields) -> bytes:
    """Return the row key for a song.

    The key is the song id itself, encoded as UTF-8. UTF-8 preserves code
    point order under byte comparison, so keys sort the same way the ids do.

    Args:
        fields: Parsed song fields.

    Returns:
        Opaque row key bytes.
    """
    return fields.song_id.encode(ROW_KEY_ENCODING)
