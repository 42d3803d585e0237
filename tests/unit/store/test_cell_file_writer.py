"""Unit tests for Parquet bulk-load file persistence."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pyarrow.parquet as pq
import pytest

from core.constants import METADATA_COLUMN
from core.errors import SongbulkEmitError
from core.types import OutputCell
from store.cell_file_writer import (
    ParquetCellFileWriter,
    check_cell_order,
    read_cell_file,
    read_cell_file_metadata,
)


def _cell(key: bytes, payload: bytes = b"v") -> OutputCell:
    return OutputCell(row_key=key, column=METADATA_COLUMN, payload=payload)


def test_write_cells_round_trips_cells_and_metadata(tmp_path: Path) -> None:
    """Written cells and metadata should read back unchanged."""
    path = tmp_path / "part-00000.parquet"
    cells = [_cell(b"a", b"\x00\x01"), _cell(b"b", b"\xff")]

    ParquetCellFileWriter().write_cells(path, cells, {"table_uri": "kiji://.env/default/songs"})

    assert read_cell_file(path) == cells
    metadata = read_cell_file_metadata(path)
    assert metadata["table_uri"] == "kiji://.env/default/songs"
    assert metadata["cell_count"] == "2"
    assert metadata["first_key"] == b"a".hex()
    assert metadata["last_key"] == b"b".hex()


def test_write_cells_declares_sort_order(tmp_path: Path) -> None:
    """Row groups should advertise the row key/column sort order."""
    path = tmp_path / "part-00000.parquet"

    ParquetCellFileWriter().write_cells(path, [_cell(b"a")], {})

    sorting_columns = pq.ParquetFile(path).metadata.row_group(0).sorting_columns
    assert [column.column_index for column in sorting_columns] == [0, 1]


def test_write_cells_refuses_unsorted_input(tmp_path: Path) -> None:
    """Out-of-order cells must never be written."""
    path = tmp_path / "part-00000.parquet"

    with pytest.raises(SongbulkEmitError):
        ParquetCellFileWriter().write_cells(path, [_cell(b"b"), _cell(b"a")], {})

    assert not path.exists()


def test_check_cell_order_rejects_repeated_cell() -> None:
    """Equal adjacent key/column pairs are not strictly ordered."""
    with pytest.raises(SongbulkEmitError):
        check_cell_order([_cell(b"a"), _cell(b"a")])


def test_check_cell_order_uses_byte_order() -> None:
    """Shorter prefixes sort first under byte comparison."""
    check_cell_order([_cell(b"song-1"), _cell(b"song-10"), _cell(b"song-2")])


def test_read_cell_file_raises_for_missing_file(tmp_path: Path) -> None:
    """Reading a missing file should raise the store error."""
    with pytest.raises(SongbulkEmitError):
        read_cell_file(tmp_path / "missing.parquet")


def test_write_cells_wraps_arrow_conversion_errors(tmp_path: Path) -> None:
    """Payloads Arrow cannot store as binary surface as the store error."""
    path = tmp_path / "part-00000.parquet"
    cells: list[Any] = [OutputCell(row_key=b"a", column=METADATA_COLUMN, payload=12345)]

    with pytest.raises(SongbulkEmitError):
        ParquetCellFileWriter().write_cells(path, cells, {})

    assert not path.exists()
