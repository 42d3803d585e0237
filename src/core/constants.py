"""Core constants used across songbulk modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

METADATA_COLUMN = "info:metadata"
TABLE_URI_SCHEME = "kiji://"
SUPPORTED_INPUT_EXTENSIONS = (".json", ".jsonl", ".txt")
INPUT_ENCODING = "utf-8-sig"
ROW_KEY_ENCODING = "utf-8"
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SHARD_SIZE = 0
DEFAULT_MAX_WORKERS = 1
SHARD_FILE_PREFIX = "part-"
SHARD_FILE_SUFFIX = ".parquet"
TEMP_FILE_SUFFIX = ".tmp"
JOB_MANIFEST_FILE_NAME = "_manifest.json"
JOB_SPEC_VERSION = 1
