"""Input shard planning.

Shards never span source files, so every shard can be re-run from its
file alone when a task is retried.
"""

from __future__ import annotations

from itertools import groupby
from typing import Sequence

from core.types import InputShard, RawRecord


def plan_shards(records: Sequence[RawRecord], shard_size: int) -> list[InputShard]:
    """Split raw records into disjoint, numbered shards.

    Args:
        records: Raw records grouped by source, in read order.
        shard_size: Maximum records per shard, ``0`` for one shard per source.

    Returns:
        Shards numbered from zero in input order.

    Raises:
        ValueError: If ``shard_size`` is negative.
    """
    if shard_size < 0:
        raise ValueError(f"shard_size must be non-negative, got {shard_size}")
    shards: list[InputShard] = []
    for source_uri, source_records in groupby(records, key=lambda record: record.source_uri):
        chunk = tuple(source_records)
        step = shard_size or len(chunk)
        for start in range(0, len(chunk), step):
            shards.append(
                InputShard(
                    shard_id=len(shards),
                    source_uri=source_uri,
                    records=chunk[start : start + step],
                )
            )
    return shards
