"""Bulk-load cell file persistence.

This module writes sorted cells into immutable Parquet files that the
table loader ingests without re-sorting, and reads them back for
verification. The emitter depends only on the ``CellFileWriter``
protocol so tests can swap in an in-memory writer.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Protocol, Sequence

import pyarrow as pa
import pyarrow.parquet as pq

from core.errors import SongbulkEmitError
from core.types import OutputCell

CELL_FILE_SCHEMA = pa.schema(
    [
        pa.field("row_key", pa.binary(), nullable=False),
        pa.field("column", pa.string(), nullable=False),
        pa.field("value", pa.binary(), nullable=False),
    ]
)
SORTING_COLUMNS = (pq.SortingColumn(0), pq.SortingColumn(1))


class CellFileWriter(Protocol):
    """Capability that persists one shard's sorted cells."""

    def write_cells(
        self,
        path: Path,
        cells: Sequence[OutputCell],
        metadata: Mapping[str, str],
    ) -> None:
        """Persist cells already sorted by row key then column."""


class ParquetCellFileWriter:
    """Writes sorted cells as a Parquet file with declared sort order."""

    def write_cells(
        self,
        path: Path,
        cells: Sequence[OutputCell],
        metadata: Mapping[str, str],
    ) -> None:
        """Write cells to ``path``.

        Args:
            path: Destination file path.
            cells: Cells sorted strictly by ``(row_key, column)``.
            metadata: File-level key/value metadata.

        Raises:
            SongbulkEmitError: If cells are out of order or the write fails.
        """
        check_cell_order(cells)
        file_metadata = {**metadata, **_key_range_metadata(cells)}
        try:
            table = pa.table(
                {
                    "row_key": [cell.row_key for cell in cells],
                    "column": [cell.column for cell in cells],
                    "value": [cell.payload for cell in cells],
                },
                schema=CELL_FILE_SCHEMA.with_metadata(file_metadata),
            )
            pq.write_table(table, path, sorting_columns=list(SORTING_COLUMNS))
        except (OSError, pa.ArrowException) as error:
            raise SongbulkEmitError(
                f"Failed to write bulk-load file at {path}: {error}. "
                "Check that payloads are bytes and the path is writable."
            ) from error


def check_cell_order(cells: Sequence[OutputCell]) -> None:
    """Fail unless cells are strictly increasing by row key then column.

    Args:
        cells: Cells in write order.

    Raises:
        SongbulkEmitError: On the first out-of-order or repeated cell.
    """
    for index in range(1, len(cells)):
        previous, current = cells[index - 1], cells[index]
        if (previous.row_key, previous.column) >= (current.row_key, current.column):
            raise SongbulkEmitError(
                f"Cell {index} ({current.row_key!r}, '{current.column}') does not sort after "
                f"({previous.row_key!r}, '{previous.column}'). Bulk-load files must be "
                "strictly ordered by row key and column."
            )


def read_cell_file(path: Path) -> list[OutputCell]:
    """Read all cells from a bulk-load file in stored order.

    Args:
        path: Bulk-load file path.

    Returns:
        Cells in file order.

    Raises:
        SongbulkEmitError: If the file is missing or unreadable.
    """
    try:
        table = pq.read_table(path)
    except (OSError, pa.ArrowException) as error:
        raise SongbulkEmitError(f"Failed to read bulk-load file at {path}: {error}.") from error
    return [
        OutputCell(row_key=row["row_key"], column=row["column"], payload=row["value"])
        for row in table.to_pylist()
    ]


def read_cell_file_metadata(path: Path) -> dict[str, str]:
    """Read file-level metadata written alongside the cells.

    Args:
        path: Bulk-load file path.

    Returns:
        Decoded metadata mapping.

    Raises:
        SongbulkEmitError: If the file is missing or unreadable.
    """
    try:
        schema = pq.read_schema(path)
    except (OSError, pa.ArrowException) as error:
        raise SongbulkEmitError(f"Failed to read bulk-load file at {path}: {error}.") from error
    return {
        key.decode("utf-8"): value.decode("utf-8")
        for key, value in (schema.metadata or {}).items()
        if not key.startswith(b"ARROW:")
    }


def _key_range_metadata(cells: Sequence[OutputCell]) -> dict[str, str]:
    range_metadata = {"cell_count": str(len(cells))}
    if cells:
        range_metadata["first_key"] = cells[0].row_key.hex()
        range_metadata["last_key"] = cells[-1].row_key.hex()
    return range_metadata
