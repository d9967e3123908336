"""Dense ``columns x rows`` matrices over an abstract scalar field.

Coefficients are stored row-major in a flat sequence (``row * columns +
column``) but addressed as ``m[column, row]``.  ``m[c]`` is the ``c``-th column
as a :class:`~genla.vector.Vector` and ``m[c0:c1, r0:r1]`` is a region.

:class:`Matrix` is immutable and hashable; :class:`MutableMatrix` overrides the
setters and the row/column primitives so that they write into its own list and
return ``self``.  Elimination based algorithms live in
:mod:`genla.elimination`, the eigensolver in :mod:`genla.eigen`.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.polynomial import Polynomial

from .config import ATOL, EIGEN_EQUALITY_TOLERANCE
from .errors import DimensionMismatchError, InvalidOperationError
from .field import REAL, Field, field_for_dtype
from .vector import BaseVector, Vector, _power


Index = Union[int, slice]


class BaseMatrix:
    """Behaviour shared by :class:`Matrix` and :class:`MutableMatrix`."""

    __slots__ = ("columns", "rows", "field", "_values")

    def __init__(self, columns: int, rows: int, values: Optional[Iterable[Any]] = None, field: Field = REAL) -> None:
        if columns < 0 or rows < 0:
            raise ValueError("matrix dimensions must be non-negative")
        if values is None:
            coerced = [field.ZERO] * (columns * rows)
        else:
            coerced = [field.coerce(v) for v in values]
        if len(coerced) != columns * rows:
            raise DimensionMismatchError(
                f"{len(coerced)} coefficients cannot fill a {columns}x{rows} matrix"
            )
        self.columns = columns
        self.rows = rows
        self.field = field
        self._values = self._store(coerced)

    @staticmethod
    def _store(values: List[Any]) -> Sequence[Any]:
        raise NotImplementedError

    @classmethod
    def _wrap(cls, columns: int, rows: int, values: Sequence[Any], field: Field) -> "BaseMatrix":
        mat = cls.__new__(cls)
        mat.columns = columns
        mat.rows = rows
        mat.field = field
        mat._values = cls._store(list(values))
        return mat

    # -- factories -------------------------------------------------------

    @classmethod
    def zero(cls, columns: int, rows: Optional[int] = None, field: Field = REAL) -> "BaseMatrix":
        rows = columns if rows is None else rows
        return cls._wrap(columns, rows, [field.ZERO] * (columns * rows), field)

    @classmethod
    def scale(cls, columns: int, rows: Optional[int] = None, factor: Any = 1, field: Field = REAL) -> "BaseMatrix":
        """``factor`` on the main diagonal, zero elsewhere."""

        rows = columns if rows is None else rows
        factor = field.coerce(factor)
        values = [field.ZERO] * (columns * rows)
        for i in range(min(columns, rows)):
            values[i * columns + i] = factor
        return cls._wrap(columns, rows, values, field)

    @classmethod
    def identity(cls, size: int, field: Field = REAL) -> "BaseMatrix":
        return cls.scale(size, size, field.ONE, field)

    @classmethod
    def diagonal(cls, values: Iterable[Any], field: Field = REAL) -> "BaseMatrix":
        diag = [field.coerce(v) for v in values]
        size = len(diag)
        flat = [field.ZERO] * (size * size)
        for i, v in enumerate(diag):
            flat[i * size + i] = v
        return cls._wrap(size, size, flat, field)

    @classmethod
    def from_grid(cls, grid: Iterable[Iterable[Any]], field: Field = REAL) -> "BaseMatrix":
        """Build from a list of rows, ``grid[r][c]``."""

        rows = [list(row) for row in grid]
        if not rows:
            return cls.zero(0, 0, field)
        width = len(rows[0])
        for row in rows:
            if len(row) != width:
                raise DimensionMismatchError("inconsistent row width")
        return cls(width, len(rows), [v for row in rows for v in row], field)

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[Any]], field: Optional[Field] = None) -> "BaseMatrix":
        rows = list(rows)
        field = _infer_field(rows, field)
        return cls.from_grid(rows, field)

    @classmethod
    def from_columns(cls, columns: Iterable[Iterable[Any]], field: Optional[Field] = None) -> "BaseMatrix":
        cols = [list(col) for col in columns]
        field = _infer_field(cols, field)
        if not cols:
            return cls.zero(0, 0, field)
        height = len(cols[0])
        for col in cols:
            if len(col) != height:
                raise DimensionMismatchError("inconsistent column height")
        return cls(len(cols), height, [cols[c][r] for r in range(height) for c in range(len(cols))], field)

    @classmethod
    def sparse(cls, columns: int, rows: int, entries: Iterable[Tuple[int, int, Any]], field: Field = REAL) -> "BaseMatrix":
        """Zero matrix with the given ``(column, row, value)`` entries set."""

        values = [field.ZERO] * (columns * rows)
        for c, r, v in entries:
            if not (0 <= c < columns and 0 <= r < rows):
                raise IndexError(f"entry ({c}, {r}) outside a {columns}x{rows} matrix")
            values[r * columns + c] = field.coerce(v)
        return cls._wrap(columns, rows, values, field)

    @classmethod
    def from_numpy(cls, array: Any, field: Optional[Field] = None) -> "BaseMatrix":
        """Build from a 2-D array indexed ``array[row, column]``."""

        array = np.asarray(array)
        if array.ndim != 2:
            raise DimensionMismatchError("expected a 2-D array")
        field = field or field_for_dtype(array.dtype)
        rows, columns = array.shape
        return cls(columns, rows, array.ravel().tolist(), field)

    @classmethod
    def from_compressed(cls, compressed: Any) -> "BaseMatrix":
        return compressed.to_matrix(cls)

    # -- container protocol ----------------------------------------------

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.columns, self.rows)

    @property
    def is_square(self) -> bool:
        return self.columns == self.rows

    def __len__(self) -> int:
        return self.columns

    def __iter__(self) -> Iterator[Vector]:
        return iter(self.column_vectors)

    def _check_index(self, column: int, row: int) -> None:
        if not (0 <= column < self.columns and 0 <= row < self.rows):
            raise IndexError(f"index ({column}, {row}) outside a {self.columns}x{self.rows} matrix")

    def get(self, column: int, row: int) -> Any:
        self._check_index(column, row)
        return self._values[row * self.columns + column]

    def __getitem__(self, index: Union[Index, Tuple[Index, Index]]) -> Any:
        if isinstance(index, tuple):
            col, row = index
            if isinstance(col, slice) or isinstance(row, slice):
                cols = range(self.columns)[col] if isinstance(col, slice) else [col]
                rows = range(self.rows)[row] if isinstance(row, slice) else [row]
                return self.region(cols, rows)
            return self.get(col, row)
        if isinstance(index, slice):
            return self.region(range(self.columns)[index], range(self.rows))
        return self.column(index)

    def region(self, columns: Iterable[int], rows: Iterable[int]) -> "Matrix":
        columns = list(columns)
        rows = list(rows)
        values = [self.get(c, r) for r in rows for c in columns]
        return Matrix._wrap(len(columns), len(rows), values, self.field)

    def column(self, index: int) -> Vector:
        if not 0 <= index < self.columns:
            raise IndexError(f"column {index} out of range")
        return Vector._wrap(self._values[index :: self.columns] if self.columns else [], self.field)

    def row(self, index: int) -> Vector:
        if not 0 <= index < self.rows:
            raise IndexError(f"row {index} out of range")
        start = index * self.columns
        return Vector._wrap(self._values[start : start + self.columns], self.field)

    @property
    def column_vectors(self) -> List[Vector]:
        return [self.column(c) for c in range(self.columns)]

    @property
    def row_vectors(self) -> List[Vector]:
        return [self.row(r) for r in range(self.rows)]

    @property
    def main_diagonal(self) -> Vector:
        return Vector._wrap(
            [self._values[i * self.columns + i] for i in range(min(self.columns, self.rows))], self.field
        )

    @property
    def trace(self) -> Any:
        return self.main_diagonal.sum()

    def to_list(self) -> List[Any]:
        return list(self._values)

    def to_grid(self) -> List[List[Any]]:
        return [list(row) for row in self.row_vectors]

    def to_numpy(self) -> np.ndarray:
        return np.array(self._values, dtype=self.field.dtype).reshape(self.rows, self.columns)

    def to_compressed(self) -> "CompressedStorageFormat":
        from .compressed import CompressedStorageFormat

        return CompressedStorageFormat.from_matrix(self)

    def copy(self) -> "Matrix":
        return Matrix._wrap(self.columns, self.rows, self._values, self.field)

    def to_mutable(self) -> "MutableMatrix":
        return MutableMatrix._wrap(self.columns, self.rows, self._values, self.field)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseMatrix):
            return NotImplemented
        return self.shape == other.shape and all(a == b for a, b in zip(self._values, other._values))

    def is_close(self, other: "BaseMatrix", tolerance: float = ATOL) -> bool:
        if self.shape != other.shape:
            return False
        close = self.field.close
        return all(close(a, b, tolerance) for a, b in zip(self._values, other._values))

    def __repr__(self) -> str:
        return f"{type(self).__name__}.from_grid({self.to_grid()!r})"

    def __str__(self) -> str:
        return "\n".join("[" + ", ".join(str(v) for v in row) + "]" for row in self.row_vectors)

    # -- setters and row/column primitives ---------------------------------

    def _target(self) -> List[Any]:
        return list(self._values)

    def _finish(self, values: List[Any]) -> "BaseMatrix":
        return Matrix._wrap(self.columns, self.rows, values, self.field)

    def set_value(self, column: int, row: int, value: Any) -> "BaseMatrix":
        self._check_index(column, row)
        target = self._target()
        target[row * self.columns + column] = self.field.coerce(value)
        return self._finish(target)

    def set_row(self, index: int, values: Iterable[Any]) -> "BaseMatrix":
        values = [self.field.coerce(v) for v in values]
        if len(values) != self.columns:
            raise DimensionMismatchError(f"row of size {len(values)} in a matrix with {self.columns} columns")
        if not 0 <= index < self.rows:
            raise IndexError(f"row {index} out of range")
        target = self._target()
        target[index * self.columns : (index + 1) * self.columns] = values
        return self._finish(target)

    def set_column(self, index: int, values: Iterable[Any]) -> "BaseMatrix":
        values = [self.field.coerce(v) for v in values]
        if len(values) != self.rows:
            raise DimensionMismatchError(f"column of size {len(values)} in a matrix with {self.rows} rows")
        if not 0 <= index < self.columns:
            raise IndexError(f"column {index} out of range")
        target = self._target()
        for r, v in enumerate(values):
            target[r * self.columns + index] = v
        return self._finish(target)

    def set_region(self, column: int, row: int, block: "BaseMatrix") -> "BaseMatrix":
        """Paste ``block`` with its top-left corner at ``(column, row)``."""

        if column < 0 or row < 0 or column + block.columns > self.columns or row + block.rows > self.rows:
            raise IndexError("region exceeds matrix bounds")
        target = self._target()
        for r in range(block.rows):
            for c in range(block.columns):
                target[(row + r) * self.columns + column + c] = block._values[r * block.columns + c]
        return self._finish(target)

    def multiply_row(self, row: int, factor: Any) -> "BaseMatrix":
        factor = self.field.coerce(factor)
        target = self._target()
        start = row * self.columns
        for i in range(start, start + self.columns):
            target[i] = target[i] * factor
        return self._finish(target)

    def swap_rows(self, first: int, second: int) -> "BaseMatrix":
        target = self._target()
        width = self.columns
        a, b = first * width, second * width
        target[a : a + width], target[b : b + width] = target[b : b + width], target[a : a + width]
        return self._finish(target)

    def add_rows(self, source: int, destination: int, factor: Any = None) -> "BaseMatrix":
        """``row[destination] += factor * row[source]``."""

        factor = self.field.ONE if factor is None else self.field.coerce(factor)
        target = self._target()
        width = self.columns
        src, dst = source * width, destination * width
        for i in range(width):
            target[dst + i] = target[dst + i] + target[src + i] * factor
        return self._finish(target)

    def multiply_column(self, column: int, factor: Any) -> "BaseMatrix":
        factor = self.field.coerce(factor)
        target = self._target()
        for i in range(column, len(target), self.columns):
            target[i] = target[i] * factor
        return self._finish(target)

    def swap_columns(self, first: int, second: int) -> "BaseMatrix":
        target = self._target()
        for r in range(self.rows):
            a, b = r * self.columns + first, r * self.columns + second
            target[a], target[b] = target[b], target[a]
        return self._finish(target)

    def add_columns(self, source: int, destination: int, factor: Any = None) -> "BaseMatrix":
        factor = self.field.ONE if factor is None else self.field.coerce(factor)
        target = self._target()
        for r in range(self.rows):
            base = r * self.columns
            target[base + destination] = target[base + destination] + target[base + source] * factor
        return self._finish(target)

    # -- arithmetic --------------------------------------------------------

    def _check_shape(self, other: "BaseMatrix") -> None:
        if self.shape != other.shape:
            raise DimensionMismatchError(f"matrix shapes {self.shape} and {other.shape} differ")

    def _map(self, func) -> "Matrix":
        return Matrix._wrap(self.columns, self.rows, [func(v) for v in self._values], self.field)

    def _zip(self, other: "BaseMatrix", func) -> "Matrix":
        self._check_shape(other)
        return Matrix._wrap(
            self.columns, self.rows, [func(a, b) for a, b in zip(self._values, other._values)], self.field
        )

    def _add_diagonal(self, scalar: Any) -> "Matrix":
        values = list(self._values)
        for i in range(min(self.columns, self.rows)):
            values[i * self.columns + i] = values[i * self.columns + i] + scalar
        return Matrix._wrap(self.columns, self.rows, values, self.field)

    def __neg__(self) -> "Matrix":
        return self._map(lambda v: -v)

    def __pos__(self) -> "Matrix":
        return self.copy()

    def __add__(self, other: Any) -> "Matrix":
        if isinstance(other, BaseMatrix):
            return self._zip(other, lambda a, b: a + b)
        if isinstance(other, BaseVector):
            return NotImplemented
        return self._add_diagonal(self.field.coerce(other))

    def __radd__(self, other: Any) -> "Matrix":
        return self.__add__(other)

    def __sub__(self, other: Any) -> "Matrix":
        if isinstance(other, BaseMatrix):
            return self._zip(other, lambda a, b: a - b)
        if isinstance(other, BaseVector):
            return NotImplemented
        return self._add_diagonal(-self.field.coerce(other))

    def __rsub__(self, other: Any) -> "Matrix":
        return (-self).__add__(other)

    def __mul__(self, factor: Any) -> "Matrix":
        if isinstance(factor, (BaseMatrix, BaseVector)):
            return NotImplemented
        factor = self.field.coerce(factor)
        return self._map(lambda v: v * factor)

    def __rmul__(self, factor: Any) -> "Matrix":
        return self.__mul__(factor)

    def __truediv__(self, factor: Any) -> "Matrix":
        if isinstance(factor, (BaseMatrix, BaseVector)):
            return NotImplemented
        return self * self.field.inverse(self.field.coerce(factor))

    def __mod__(self, factor: Any) -> "Matrix":
        factor = self.field.coerce(factor)
        return self._map(lambda v: v % factor)

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, BaseMatrix):
            return self.multiply(other)
        if isinstance(other, BaseVector):
            return self.transform(other)
        return NotImplemented

    def __rmatmul__(self, other: Any) -> Any:
        if isinstance(other, BaseVector):
            if len(other) != self.rows:
                raise DimensionMismatchError(f"vector of size {len(other)} times a matrix with {self.rows} rows")
            return Vector._wrap([other.dot(self.column(c)) for c in range(self.columns)], self.field)
        return NotImplemented

    def multiply(self, other: "BaseMatrix") -> "Matrix":
        if self.columns != other.rows:
            raise DimensionMismatchError(
                f"cannot multiply a {self.columns}x{self.rows} by a {other.columns}x{other.rows} matrix"
            )
        zero = self.field.ZERO
        inner = self.columns
        values = []
        for r in range(self.rows):
            left = self._values[r * inner : (r + 1) * inner]
            for c in range(other.columns):
                total = zero
                for k in range(inner):
                    total = total + left[k] * other._values[k * other.columns + c]
                values.append(total)
        return Matrix._wrap(other.columns, self.rows, values, self.field)

    def transform(self, vector: BaseVector) -> Vector:
        """Matrix-vector product ``M @ v``."""

        if len(vector) != self.columns:
            raise DimensionMismatchError(f"vector of size {len(vector)} for a matrix with {self.columns} columns")
        return Vector._wrap([self.row(r).dot(vector) for r in range(self.rows)], self.field)

    def __pow__(self, exponent: int) -> "Matrix":
        if not self.is_square:
            raise InvalidOperationError("only square matrices can be raised to a power")
        base: BaseMatrix = self
        if exponent < 0:
            base = self.inverse()
            exponent = -exponent
        result: BaseMatrix = Matrix.identity(self.columns, self.field)
        while exponent:
            if exponent & 1:
                result = result @ base
            base = base @ base
            exponent >>= 1
        return result  # type: ignore[return-value]

    def componentwise_multiply(self, other: "BaseMatrix") -> "Matrix":
        return self._zip(other, lambda a, b: a * b)

    def componentwise_divide(self, other: "BaseMatrix") -> "Matrix":
        inverse = self.field.inverse
        return self._zip(other, lambda a, b: a * inverse(b))

    def componentwise_power(self, exponent: int) -> "Matrix":
        return self._map(lambda v: _power(self.field, v, exponent))

    def lerp(self, other: "BaseMatrix", factor: Any) -> "Matrix":
        factor = self.field.coerce(factor)
        return self._zip(other, lambda a, b: a + (b - a) * factor)

    # -- structure ---------------------------------------------------------

    def transposed(self) -> "Matrix":
        values = [self._values[r * self.columns + c] for c in range(self.columns) for r in range(self.rows)]
        return Matrix._wrap(self.rows, self.columns, values, self.field)

    def conjugate_transposed(self) -> "Matrix":
        return self.transposed()._map(self.field.conjugate)

    def minor(self, column: int, row: int) -> "Matrix":
        """Drop ``column`` and ``row``."""

        self._check_index(column, row)
        return self.region(
            [c for c in range(self.columns) if c != column],
            [r for r in range(self.rows) if r != row],
        )

    def principal_submatrices(self) -> List["Matrix"]:
        """Leading ``k x k`` blocks for ``k = 1 .. min(columns, rows) - 1``."""

        return [self.region(range(k), range(k)) for k in range(1, min(self.columns, self.rows))]

    # -- predicates --------------------------------------------------------

    def _all_zero(self, indices: Iterable[Tuple[int, int]], tolerance: float) -> bool:
        abs_ = self.field.abs
        return all(abs_(self._values[r * self.columns + c]) <= tolerance for c, r in indices)

    def _cells(self) -> Iterator[Tuple[int, int]]:
        return ((c, r) for r in range(self.rows) for c in range(self.columns))

    def is_zero(self, tolerance: float = 0) -> bool:
        return self._all_zero(self._cells(), tolerance)

    def is_identity(self, tolerance: float = 0) -> bool:
        return self.is_close(Matrix.scale(self.columns, self.rows, self.field.ONE, self.field), tolerance)

    def is_diagonal(self, tolerance: float = 0) -> bool:
        return self._all_zero(((c, r) for c, r in self._cells() if c != r), tolerance)

    def is_upper_triangular(self, tolerance: float = 0) -> bool:
        return self._all_zero(((c, r) for c, r in self._cells() if c < r), tolerance)

    def is_lower_triangular(self, tolerance: float = 0) -> bool:
        return self._all_zero(((c, r) for c, r in self._cells() if c > r), tolerance)

    def is_symmetric(self, tolerance: float = 0) -> bool:
        return self.is_close(self.transposed(), tolerance)

    def is_skew_symmetric(self, tolerance: float = 0) -> bool:
        return self.is_close(-self.transposed(), tolerance)

    def is_projection(self, tolerance: float = ATOL) -> bool:
        return self.is_square and (self @ self).is_close(self, tolerance)

    def is_involutory(self, tolerance: float = ATOL) -> bool:
        return self.is_square and (self @ self).is_identity(tolerance)

    def is_orthogonal(self, tolerance: float = ATOL) -> bool:
        """``M Mᴴ == I``; unitary over the complex field."""

        return self.is_square and (self @ self.conjugate_transposed()).is_identity(tolerance)

    def is_invertible(self) -> bool:
        from .elimination import rank

        return self.is_square and rank(self) == self.columns

    def is_hollow(self, tolerance: float = 0) -> bool:
        return all(self.field.abs(v) <= tolerance for v in self.main_diagonal)

    def is_sign_matrix(self) -> bool:
        """Diagonal with every diagonal entry in ``{-1, 0, 1}``."""

        field = self.field
        return self.is_diagonal() and all(
            field.is_zero(v) or field.is_one(field.coerce(field.abs(v))) for v in self.main_diagonal
        )

    def is_signature_matrix(self) -> bool:
        field = self.field
        return self.is_diagonal() and all(field.is_one(field.coerce(field.abs(v))) for v in self.main_diagonal)

    def is_conference_matrix(self, tolerance: float = ATOL) -> bool:
        """``M Mᵀ`` is a multiple of the identity."""

        if self.columns == 0 or self.rows == 0:
            return False
        gram = self @ self.transposed()
        return gram.is_close(Matrix.scale(gram.columns, gram.rows, gram.get(0, 0), self.field), tolerance)

    def is_positive_definite(self) -> bool:
        """Sylvester's criterion on every leading principal minor."""

        if not self.is_square or self.columns == 0:
            return False
        return all(self.field.is_positive(m.determinant()) for m in self.principal_submatrices() + [self])

    def is_hurwitz_stable(self) -> bool:
        if self.columns == 0 or self.rows == 0:
            return False
        return self.field.is_positive(self.get(0, 0)) and all(
            self.field.is_positive(m.determinant()) for m in self.principal_submatrices()
        )

    def has_nans(self) -> bool:
        return not all(self.field.is_finite(v) for v in self._values)

    # -- algorithms --------------------------------------------------------

    def determinant(self) -> Any:
        """Cofactor expansion; ``sqrt(det(MᵀM))`` for non-square matrices."""

        field = self.field
        if not self.is_square:
            return field.sqrt((self.transposed() @ self).determinant())
        n = self.columns
        v = self._values
        if n == 0:
            return field.ONE
        if n == 1:
            return v[0]
        if n == 2:
            return v[0] * v[3] - v[1] * v[2]
        if n == 3:
            return (
                v[0] * v[4] * v[8]
                + v[1] * v[5] * v[6]
                + v[2] * v[3] * v[7]
                - v[2] * v[4] * v[6]
                - v[1] * v[3] * v[8]
                - v[0] * v[5] * v[7]
            )
        total = field.ZERO
        for r in range(n):
            entry = v[r * n]
            if field.is_zero(entry):
                continue
            term = entry * self.minor(0, r).determinant()
            total = total - term if r % 2 else total + term
        return total

    def pivot_determinant(self) -> Any:
        from .elimination import pivot_determinant

        return pivot_determinant(self)

    def inverse(self) -> "Matrix":
        from .elimination import inverse

        return inverse(self)

    def solve(self, rhs: BaseVector) -> Tuple[bool, Vector]:
        from .elimination import solve

        return solve(self, rhs)

    def row_echelon(self) -> "Matrix":
        from .elimination import row_echelon

        return row_echelon(self).matrix

    def rank(self) -> int:
        from .elimination import rank

        return rank(self)

    def orthonormal_basis(self, tolerance: float = ATOL) -> "Matrix":
        """Modified Gram-Schmidt over the columns.

        A column that lies in the span of the previous ones leaves only a
        residual of at most ``tolerance`` times its own length and becomes a
        zero column.
        """

        field = self.field
        basis: List[Vector] = []
        for col in self.column_vectors:
            v = col
            for q in basis:
                projection = Vector._wrap([field.conjugate(x) for x in q], field).dot(v)
                v = v - q * projection
            if field.exact:
                dependent = v.is_zero()
            else:
                dependent = field.abs(v.length) <= tolerance * field.abs(col.length)
            basis.append(Vector.zero(len(v), field) if dependent else v.normalized())
        return Matrix.from_columns(basis, field)

    def iwasawa_decompose(self) -> Tuple["Matrix", "Matrix"]:
        """``(U, Uᴴ M)`` with ``U`` the orthonormal basis."""

        basis = self.orthonormal_basis()
        return basis, basis.conjugate_transposed() @ self

    def eigenpairs(self, solver: Any = None) -> List[Tuple[Vector, Any]]:
        from .eigen import InverseIteration

        return (solver or InverseIteration()).pairs(self)

    def eigen_decompose(
        self, tolerance: float = EIGEN_EQUALITY_TOLERANCE, solver: Any = None
    ) -> Tuple[List[Vector], List[Any]]:
        """Distinct eigenvectors and eigenvalues; ``tolerance`` merges near-equal ones."""

        from .eigen import InverseIteration

        return (solver or InverseIteration(equality_tolerance=tolerance)).decompose(self)

    def eigenvalues(self, tolerance: float = EIGEN_EQUALITY_TOLERANCE) -> List[Any]:
        return self.eigen_decompose(tolerance)[1]

    def eigenvectors(self, tolerance: float = EIGEN_EQUALITY_TOLERANCE) -> List[Vector]:
        return self.eigen_decompose(tolerance)[0]

    def singular_values(self, tolerance: float = EIGEN_EQUALITY_TOLERANCE) -> List[Any]:
        return [self.field.sqrt(v) for v in (self.transposed() @ self).eigenvalues(tolerance)]

    def characteristic_polynomial(self, solver: Any = None) -> Polynomial:
        """``Π (x - λᵢ)`` over every eigenvalue, repeated ones included."""

        roots = [value for _, value in self.eigenpairs(solver)]
        return Polynomial.fromroots(np.array(roots, dtype=self.field.dtype))


class Matrix(BaseMatrix):
    """Immutable matrix."""

    __slots__ = ()

    @staticmethod
    def _store(values: List[Any]) -> Tuple[Any, ...]:
        return tuple(values)

    def __hash__(self) -> int:
        return hash((self.columns, self.rows, self.field, self._values))


class MutableMatrix(BaseMatrix):
    """Matrix whose setters and row/column primitives work in place."""

    __slots__ = ()
    __hash__ = None  # type: ignore[assignment]

    @staticmethod
    def _store(values: List[Any]) -> List[Any]:
        return values

    def _target(self) -> List[Any]:
        return self._values  # type: ignore[return-value]

    def _finish(self, values: List[Any]) -> "MutableMatrix":
        return self

    def __setitem__(self, index: Tuple[int, int], value: Any) -> None:
        column, row = index
        self.set_value(column, row, value)


def _infer_field(items: Sequence[Any], field: Optional[Field]) -> Field:
    if field is not None:
        return field
    for item in items:
        if isinstance(item, (BaseVector, BaseMatrix)):
            return item.field
    return REAL
