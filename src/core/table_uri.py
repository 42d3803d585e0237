"""Target table identifier parsing.

Bulk-load files are tagged with the table they were built for so the
loader can refuse artifacts meant for another table.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import TABLE_URI_SCHEME
from core.errors import SongbulkConfigError


@dataclass(frozen=True)
class TableLocation:
    """Parsed table identifier."""

    cluster: str
    instance: str
    table: str

    @property
    def uri(self) -> str:
        """Canonical URI string."""
        return f"{TABLE_URI_SCHEME}{self.cluster}/{self.instance}/{self.table}"


def parse_table_uri(uri: str) -> TableLocation:
    """Parse and validate a target table URI.

    Args:
        uri: URI in format ``kiji://cluster/instance/table``.

    Returns:
        Parsed table location.

    Raises:
        SongbulkConfigError: If scheme or any path segment is missing.
    """
    if not uri.startswith(TABLE_URI_SCHEME):
        _raise_uri_error(uri)
    segments = uri.removeprefix(TABLE_URI_SCHEME).rstrip("/").split("/")
    if len(segments) != 3 or not all(segments):
        _raise_uri_error(uri)
    cluster, instance, table = segments
    return TableLocation(cluster=cluster, instance=instance, table=table)


def _raise_uri_error(uri: str) -> None:
    raise SongbulkConfigError(
        f"Invalid table URI '{uri}': expected {TABLE_URI_SCHEME}cluster/instance/table. "
        "Pass the URI of the target songs table."
    )
