"""Sorted output emitter.

This module buffers one shard's cells and flushes them, sorted, into a
single bulk-load file. Duplicate ``(row_key, column)`` pairs resolve to
the last emitted value and are recorded for audit.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from core.constants import TEMP_FILE_SUFFIX
from core.errors import DuplicateKeyError, SongbulkEmitError
from core.logging_config import get_logger
from core.types import OutputCell
from store.cell_file_writer import CellFileWriter

_LOGGER = get_logger(__name__)


class SortedCellEmitter:
    """Per-shard cell buffer with a one-shot sorted flush.

    The buffer is owned by a single shard task, so no locking is needed;
    ``finalize`` is the barrier between emitting and writing.
    """

    def __init__(
        self,
        output_path: Path,
        writer: CellFileWriter,
        file_metadata: Mapping[str, str] | None = None,
    ) -> None:
        self._output_path = output_path
        self._writer = writer
        self._file_metadata = dict(file_metadata or {})
        self._cells: list[OutputCell] = []
        self._duplicates: list[DuplicateKeyError] = []
        self._finalized = False

    @property
    def duplicates(self) -> tuple[DuplicateKeyError, ...]:
        """Collisions resolved by the last flush."""
        return tuple(self._duplicates)

    def emit(self, key: bytes, column: str, payload: bytes) -> None:
        """Buffer one cell.

        Raises:
            SongbulkEmitError: If the emitter was already finalized.
        """
        if self._finalized:
            raise SongbulkEmitError(
                f"Cannot emit to {self._output_path}: emitter is already finalized."
            )
        self._cells.append(OutputCell(row_key=key, column=column, payload=payload))

    def finalize(self) -> Path:
        """Sort buffered cells and write them as one bulk-load file.

        The file is written under a temporary name and renamed into place,
        so a failed flush never leaves a partial artifact behind.

        Returns:
            Path of the written file.

        Raises:
            SongbulkEmitError: If called twice or the writer fails.
        """
        if self._finalized:
            raise SongbulkEmitError(f"Emitter for {self._output_path} was already finalized.")
        self._finalized = True
        cells = self._collapse_duplicates(sorted(self._cells, key=_cell_sort_key))
        self._cells = []
        temp_path = self._output_path.with_name(self._output_path.name + TEMP_FILE_SUFFIX)
        try:
            self._writer.write_cells(temp_path, cells, self._file_metadata)
            temp_path.replace(self._output_path)
        finally:
            temp_path.unlink(missing_ok=True)
        return self._output_path

    def _collapse_duplicates(self, sorted_cells: list[OutputCell]) -> list[OutputCell]:
        # sorted() is stable, so within a run of equal keys emit order is kept.
        unique_cells: list[OutputCell] = []
        for cell in sorted_cells:
            if unique_cells and _cell_sort_key(unique_cells[-1]) == _cell_sort_key(cell):
                duplicate = DuplicateKeyError(cell.row_key, cell.column)
                self._duplicates.append(duplicate)
                _LOGGER.warning(
                    "duplicate_row_key",
                    output_path=str(self._output_path),
                    row_key=cell.row_key.decode("utf-8", "backslashreplace"),
                    column=cell.column,
                )
                unique_cells[-1] = cell
                continue
            unique_cells.append(cell)
        return unique_cells


def _cell_sort_key(cell: OutputCell) -> tuple[bytes, str]:
    return (cell.row_key, cell.column)
