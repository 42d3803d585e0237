"""Song metadata record parser.

This module decodes one JSON input line into typed song fields.
Failures are returned as error values so the shard driver decides
whether a bad line drops the record or fails the shard.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from core.constants import INT64_MAX, INT64_MIN
from core.errors import InvalidNumericFieldError, SongbulkParseError
from core.types import ParsedFields

STRING_FIELDS = ("song_id", "song_name", "album_name", "artist_name", "genre")
INTEGER_FIELDS = ("tempo", "duration")
REQUIRED_FIELDS = STRING_FIELDS + INTEGER_FIELDS

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MAX_DIGITS = len(str(INT64_MAX))


def parse_song_record(line: str) -> ParsedFields | SongbulkParseError:
    """Parse one JSON line into typed song fields.

    Args:
        line: Raw input line holding one JSON object.

    Returns:
        Parsed fields, or the parse error describing why the line is invalid.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        return SongbulkParseError(f"Malformed JSON record: {error.msg} at column {error.colno}.")
    except (ValueError, RecursionError) as error:
        # Oversized integer literals and deeply nested arrays.
        return SongbulkParseError(f"Malformed JSON record: {error}.")
    if not isinstance(payload, dict):
        return SongbulkParseError(
            f"Malformed record: expected a JSON object, got {type(payload).__name__}."
        )
    missing_fields = [name for name in REQUIRED_FIELDS if name not in payload]
    if missing_fields:
        return SongbulkParseError(
            f"Record is missing required fields: {', '.join(missing_fields)}.",
            field_name=missing_fields[0],
        )
    return _build_fields(payload)


def _build_fields(payload: Mapping[str, Any]) -> ParsedFields | SongbulkParseError:
    strings: dict[str, str] = {}
    for name in STRING_FIELDS:
        value = payload[name]
        if not isinstance(value, str):
            return SongbulkParseError(
                f"Field '{name}' must be a string, got {type(value).__name__}.",
                field_name=name,
            )
        if not _is_encodable(value):
            return SongbulkParseError(
                f"Field '{name}' contains characters that cannot be encoded as UTF-8.",
                field_name=name,
            )
        strings[name] = value
    integers: dict[str, int] = {}
    for name in INTEGER_FIELDS:
        coerced = coerce_int64(name, payload[name])
        if isinstance(coerced, InvalidNumericFieldError):
            return coerced
        integers[name] = coerced
    return ParsedFields(**strings, **integers)


def coerce_int64(field_name: str, value: object) -> int | InvalidNumericFieldError:
    """Coerce an integer-valued string or JSON integer to a signed 64-bit int.

    Args:
        field_name: Field being coerced, for error context.
        value: Raw decoded JSON value.

    Returns:
        Parsed integer, or an error for non-integers and out-of-range values.
    """
    if isinstance(value, bool):
        return _numeric_error(field_name, value)
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and _INTEGER_PATTERN.fullmatch(value):
        digits = value.lstrip("+-").lstrip("0") or "0"
        if len(digits) > _INT64_MAX_DIGITS:
            return _range_error(field_name, value)
        number = -int(digits) if value.startswith("-") else int(digits)
    else:
        return _numeric_error(field_name, value)
    if not INT64_MIN <= number <= INT64_MAX:
        return _range_error(field_name, value)
    return number


def _is_encodable(value: str) -> bool:
    # json.loads accepts lone surrogate escapes such as "\ud800".
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _numeric_error(field_name: str, value: object) -> InvalidNumericFieldError:
    return InvalidNumericFieldError(
        f"Field '{field_name}' must be an integer-valued string, got {value!r}.",
        field_name=field_name,
    )


def _range_error(field_name: str, value: object) -> InvalidNumericFieldError:
    shown = value if not isinstance(value, str) or len(value) <= 40 else f"{value[:20]}..."
    return InvalidNumericFieldError(
        f"Field '{field_name}' value {shown!r} does not fit in a signed 64-bit integer.",
        field_name=field_name,
    )
