"""Compressed sparse column (CSC) codec for dense matrices.

Layout of :meth:`CompressedStorageFormat.to_bytes` (little endian)::

    int32 columns, int32 rows, int32 n_values, int32 n_rows, int32 n_cols
    n_values * field.nbytes   value entries
    n_rows   * int32          row index of each value
    n_cols   * int32          column pointers

``col_pointers[c]`` is the number of non-zero entries in columns ``0..c``,
i.e. an end pointer, so ``len(col_pointers) == columns`` and the last pointer
equals ``len(values)``.  :mod:`scipy.sparse` stores the same information as
``indptr = [0] + col_pointers``.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Type

import numpy as np
from scipy import sparse

from .config import BYTE_ORDER, MAX_DENSE_ENTRIES
from .errors import MalformedDataError
from .field import REAL, Field, field_for_dtype
from .matrix import BaseMatrix, Matrix

logger = logging.getLogger(__name__)

HEADER = struct.Struct(BYTE_ORDER + "5i")
INT_SIZE = 4


@dataclass(frozen=True)
class CompressedStorageFormat:
    """Immutable CSC snapshot of a ``columns x rows`` matrix."""

    columns: int
    rows: int
    values: Tuple[Any, ...]
    row_indices: Tuple[int, ...]
    col_pointers: Tuple[int, ...]
    field: Field = REAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))
        object.__setattr__(self, "row_indices", tuple(int(r) for r in self.row_indices))
        object.__setattr__(self, "col_pointers", tuple(int(p) for p in self.col_pointers))
        self._validate()

    def _validate(self) -> None:
        if self.columns < 0 or self.rows < 0:
            raise MalformedDataError(f"negative dimensions {self.columns}x{self.rows}")
        if len(self.values) != len(self.row_indices):
            raise MalformedDataError(
                f"{len(self.values)} values but {len(self.row_indices)} row indices"
            )
        if len(self.col_pointers) != self.columns:
            raise MalformedDataError(
                f"{len(self.col_pointers)} column pointers for {self.columns} columns"
            )
        start = 0
        for column, end in enumerate(self.col_pointers):
            if end < start:
                raise MalformedDataError(f"column pointer {column} decreases")
            previous = -1
            for row in self.row_indices[start:end]:
                if not previous < row < self.rows:
                    raise MalformedDataError(f"row index {row} invalid in column {column}")
                previous = row
            start = end
        if start != len(self.values):
            raise MalformedDataError(
                f"column pointers cover {start} entries, {len(self.values)} values stored"
            )

    # -- encoding ----------------------------------------------------------

    @classmethod
    def from_matrix(cls, matrix: BaseMatrix) -> "CompressedStorageFormat":
        """Scan ``matrix`` column-major and keep its non-zero entries."""

        field = matrix.field
        values = []
        row_indices = []
        col_pointers = []
        for column in range(matrix.columns):
            for row in range(matrix.rows):
                value = matrix.get(column, row)
                if not field.is_zero(value):
                    values.append(value)
                    row_indices.append(row)
            col_pointers.append(len(values))
        return cls(matrix.columns, matrix.rows, tuple(values), tuple(row_indices), tuple(col_pointers), field)

    def to_matrix(self, matrix_type: Type[BaseMatrix] = Matrix) -> BaseMatrix:
        entries = []
        start = 0
        for column, end in enumerate(self.col_pointers):
            for i in range(start, end):
                entries.append((column, self.row_indices[i], self.values[i]))
            start = end
        return matrix_type.sparse(self.columns, self.rows, entries, self.field)

    @property
    def nnz(self) -> int:
        return len(self.values)

    @property
    def compressed_size(self) -> int:
        """Payload bytes, header excluded."""

        return self.field.nbytes * len(self.values) + INT_SIZE * (len(self.row_indices) + len(self.col_pointers))

    @property
    def uncompressed_size(self) -> int:
        return self.field.nbytes * self.columns * self.rows

    @property
    def compression_efficiency(self) -> float:
        if self.uncompressed_size == 0:
            return 0.0
        return 1.0 - self.compressed_size / self.uncompressed_size

    # -- binary form -------------------------------------------------------

    def to_bytes(self) -> bytes:
        header = HEADER.pack(
            self.columns, self.rows, len(self.values), len(self.row_indices), len(self.col_pointers)
        )
        body = b"".join(self.field.pack(v) for v in self.values)
        rows = struct.pack(f"{BYTE_ORDER}{len(self.row_indices)}i", *self.row_indices)
        cols = struct.pack(f"{BYTE_ORDER}{len(self.col_pointers)}i", *self.col_pointers)
        return header + body + rows + cols

    @classmethod
    def from_bytes(
        cls, data: bytes, field: Field = REAL, max_entries: int = MAX_DENSE_ENTRIES
    ) -> "CompressedStorageFormat":
        """Decode :meth:`to_bytes` output, validating every declared length.

        Headers declaring more than ``max_entries`` dense coefficients are
        rejected, since :meth:`to_matrix` materialises all of them.
        """

        data = bytes(data)
        if len(data) < HEADER.size:
            raise MalformedDataError(f"buffer of {len(data)} bytes is shorter than the header")
        columns, rows, n_values, n_rows, n_cols = HEADER.unpack_from(data, 0)
        if min(columns, rows, n_values, n_rows, n_cols) < 0:
            raise MalformedDataError("negative count in header")
        if columns * rows > max_entries:
            raise MalformedDataError(
                f"{columns}x{rows} matrix exceeds the limit of {max_entries} dense entries"
            )
        expected = HEADER.size + n_values * field.nbytes + INT_SIZE * (n_rows + n_cols)
        if len(data) != expected:
            raise MalformedDataError(f"header declares {expected} bytes, buffer holds {len(data)}")

        offset = HEADER.size
        values = []
        try:
            for _ in range(n_values):
                values.append(field.unpack(data[offset : offset + field.nbytes]))
                offset += field.nbytes
        except (struct.error, ZeroDivisionError, ValueError) as exc:
            raise MalformedDataError(f"undecodable value at byte {offset}") from exc
        row_indices = struct.unpack_from(f"{BYTE_ORDER}{n_rows}i", data, offset)
        offset += INT_SIZE * n_rows
        col_pointers = struct.unpack_from(f"{BYTE_ORDER}{n_cols}i", data, offset)

        result = cls(columns, rows, tuple(values), row_indices, col_pointers, field)
        logger.debug(
            "decoded %dx%d matrix with %d non-zeros (efficiency %.3f)",
            columns,
            rows,
            n_values,
            result.compression_efficiency,
        )
        return result

    # -- scipy interop -----------------------------------------------------

    def to_scipy(self) -> sparse.csc_array:
        """``scipy.sparse.csc_array`` of shape ``(rows, columns)``."""

        return sparse.csc_array(
            (
                np.array(self.values, dtype=self.field.dtype),
                np.array(self.row_indices, dtype=np.int32),
                np.array((0,) + self.col_pointers, dtype=np.int32),
            ),
            shape=(self.rows, self.columns),
        )

    @classmethod
    def from_scipy(cls, array: Any, field: Optional[Field] = None) -> "CompressedStorageFormat":
        csc = sparse.csc_array(array, copy=True)
        csc.eliminate_zeros()
        csc.sort_indices()
        field = field or field_for_dtype(csc.dtype)
        rows, columns = csc.shape
        return cls(
            columns,
            rows,
            tuple(field.coerce(v) for v in csc.data.tolist()),
            tuple(csc.indices.tolist()),
            tuple(csc.indptr[1:].tolist()),
            field,
        )
