"""Runtime configuration model for songbulk.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from core.constants import DEFAULT_LOG_LEVEL, DEFAULT_MAX_WORKERS, DEFAULT_SHARD_SIZE
from core.errors import SongbulkConfigError


@dataclass(frozen=True)
class SongbulkConfig:
    """Validated runtime configuration.

    Attributes:
        s3_region: Optional default AWS region for S3 input reads.
        s3_profile: Optional AWS profile for boto3 session initialization.
        log_level: Minimum structured log level name.
        shard_size: Maximum records per shard, ``0`` for one shard per file.
        max_workers: Number of shard tasks run concurrently.
    """

    s3_region: str | None
    s3_profile: str | None
    log_level: str
    shard_size: int
    max_workers: int

    @classmethod
    def from_env(cls) -> "SongbulkConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SongbulkConfigError: If environment values are invalid.
        """
        log_level = _parse_log_level(os.getenv("SONGBULK_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        shard_size = _parse_int_setting(
            "SONGBULK_SHARD_SIZE",
            os.getenv("SONGBULK_SHARD_SIZE", str(DEFAULT_SHARD_SIZE)),
            minimum=0,
        )
        max_workers = _parse_int_setting(
            "SONGBULK_MAX_WORKERS",
            os.getenv("SONGBULK_MAX_WORKERS", str(DEFAULT_MAX_WORKERS)),
            minimum=1,
        )
        return cls(
            s3_region=os.getenv("SONGBULK_S3_REGION"),
            s3_profile=os.getenv("SONGBULK_S3_PROFILE"),
            log_level=log_level,
            shard_size=shard_size,
            max_workers=max_workers,
        )


def _parse_log_level(raw_value: str) -> str:
    """Normalize and validate a log level name.

    Args:
        raw_value: Raw level name from environment.

    Returns:
        Upper-cased level name.

    Raises:
        SongbulkConfigError: If the name is not a stdlib logging level.
    """
    level_name = raw_value.strip().upper()
    if not isinstance(logging.getLevelName(level_name), int):
        raise SongbulkConfigError(
            f"Invalid SONGBULK_LOG_LEVEL value '{raw_value}'. "
            "Use one of DEBUG, INFO, WARNING, ERROR."
        )
    return level_name


def _parse_int_setting(env_name: str, raw_value: str, minimum: int) -> int:
    """Parse a bounded integer environment value.

    Args:
        env_name: Variable name for error context.
        raw_value: Raw string from environment.
        minimum: Smallest accepted value.

    Returns:
        Parsed integer.

    Raises:
        SongbulkConfigError: If value is not an integer or below minimum.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise SongbulkConfigError(
            f"Invalid {env_name} value: expected integer, got '{raw_value}'. "
            f"Set {env_name} to a numeric value."
        ) from error
    if value < minimum:
        raise SongbulkConfigError(
            f"Invalid {env_name} value {value}: must be at least {minimum}."
        )
    return value
