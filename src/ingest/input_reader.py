"""Source line readers for bulk import.

This module loads JSON-lines input from local paths or S3 prefixes.
It yields raw records tagged with their source and line number.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Iterable

from core.config import SongbulkConfig
from core.constants import INPUT_ENCODING, SUPPORTED_INPUT_EXTENSIONS
from core.errors import SongbulkDependencyError, SongbulkIngestError
from core.s3_uri import S3Location, parse_s3_uri
from core.types import RawRecord


def read_raw_records(input_uri: str, config: SongbulkConfig) -> list[RawRecord]:
    """Load raw input lines from local files or S3.

    Args:
        input_uri: Local file, local directory, or ``s3://`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Non-blank lines in source order, files in sorted path order.

    Raises:
        SongbulkIngestError: If the input cannot be read.
    """
    if input_uri.startswith("s3://"):
        return _read_s3_records(input_uri, config)
    return _read_local_records(Path(input_uri).expanduser())


def _read_local_records(source_path: Path) -> list[RawRecord]:
    """Read records from the local file system.

    Args:
        source_path: Input file or directory.

    Returns:
        Collected raw records.

    Raises:
        SongbulkIngestError: If path is missing or holds no input files.
    """
    if not source_path.exists():
        raise SongbulkIngestError(
            f"Failed to read input at {source_path}: path does not exist. "
            "Provide an existing file or directory."
        )
    if source_path.is_file():
        return _read_file_records(source_path)
    input_files = [
        file_path
        for file_path in sorted(source_path.rglob("*"))
        if file_path.is_file() and _is_supported_name(file_path.name)
    ]
    if not input_files:
        raise SongbulkIngestError(
            f"No input files found under {source_path}. "
            f"Supported extensions: {SUPPORTED_INPUT_EXTENSIONS}."
        )
    records: list[RawRecord] = []
    for file_path in input_files:
        records.extend(_read_file_records(file_path))
    return records


def _read_file_records(file_path: Path) -> list[RawRecord]:
    """Read raw records from one local file.

    Raises:
        SongbulkIngestError: If the file is unreadable or not UTF-8.
    """
    try:
        with file_path.open(encoding=INPUT_ENCODING) as handle:
            return _records_from_lines(str(file_path), handle)
    except (OSError, UnicodeDecodeError) as error:
        raise SongbulkIngestError(
            f"Failed to read input file {file_path}: {error}. "
            "Input must be readable UTF-8 text."
        ) from error


def _records_from_lines(source_uri: str, lines: Iterable[str]) -> list[RawRecord]:
    """Build raw records from text lines, skipping blank ones.

    Args:
        source_uri: Source path or URI.
        lines: Lines with universal newlines already applied.

    Returns:
        Raw records with one-based line numbers.
    """
    records: list[RawRecord] = []
    for line_number, line in enumerate(lines, 1):
        text = line.rstrip("\n")
        if not text.strip():
            continue
        records.append(RawRecord(source_uri=source_uri, line_number=line_number, text=text))
    return records


def _read_s3_records(input_uri: str, config: SongbulkConfig) -> list[RawRecord]:
    """Read records from S3 objects under a prefix.

    Args:
        input_uri: S3 prefix URI.
        config: Runtime configuration for region/profile.

    Returns:
        Raw records loaded from matching objects.

    Raises:
        SongbulkIngestError: If no matching objects exist or a body is not UTF-8.
    """
    location = parse_s3_uri(input_uri)
    s3_client = _create_s3_client(config)
    object_keys = _list_s3_keys(s3_client, location)
    if not object_keys:
        raise SongbulkIngestError(
            f"No input objects found for {input_uri}. "
            f"Upload {'/'.join(SUPPORTED_INPUT_EXTENSIONS)} files and retry."
        )
    records: list[RawRecord] = []
    for key in object_keys:
        source_uri = f"s3://{location.bucket}/{key}"
        raw_body = s3_client.get_object(Bucket=location.bucket, Key=key)["Body"].read()
        try:
            body = raw_body.decode(INPUT_ENCODING)
        except UnicodeDecodeError as error:
            raise SongbulkIngestError(
                f"Failed to decode {source_uri}: {error}. Input must be UTF-8 text."
            ) from error
        records.extend(_records_from_lines(source_uri, io.StringIO(body, newline=None)))
    return records


def _create_s3_client(config: SongbulkConfig) -> Any:
    """Create a boto3 S3 client.

    Raises:
        SongbulkDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise SongbulkDependencyError(
            "S3 input requires boto3, but it is not installed. "
            "Install songbulk[s3] to read from s3:// sources."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    """List supported object keys under an S3 prefix, sorted."""
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=location.bucket, Prefix=location.prefix)
    keys: list[str] = []
    for page in pages:
        for obj in page.get("Contents", []):
            if _is_supported_name(obj["Key"]):
                keys.append(obj["Key"])
    return sorted(keys)


def _is_supported_name(name: str) -> bool:
    return Path(name).suffix.lower() in SUPPORTED_INPUT_EXTENSIONS
