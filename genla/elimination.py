"""Partial-pivot Gaussian elimination kernels.

Every routine copies its input into a :class:`~genla.matrix.MutableMatrix`
and runs the row primitives in place.  Pivot selection takes the largest
magnitude (``Field.abs``) at or below the current pivot row; columns whose
best candidate is negligible are skipped: exactly zero over exact fields,
within ``atol`` times the largest entry otherwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field as dc_field
from typing import Any, List, Sequence, Tuple

from .config import ATOL
from .errors import DimensionMismatchError, InvalidOperationError, SingularMatrixError
from .field import Field
from .matrix import BaseMatrix, Matrix, MutableMatrix
from .vector import BaseVector, Vector


@dataclass
class Elimination:
    """Outcome of one elimination pass."""

    matrix: Matrix
    pivots: List[Any] = dc_field(default_factory=list)
    pivot_columns: List[int] = dc_field(default_factory=list)
    swaps: int = 0
    companions: List[Matrix] = dc_field(default_factory=list)

    @property
    def rank(self) -> int:
        return len(self.pivots)


def _threshold(matrix: BaseMatrix, atol: float) -> float:
    """Magnitude at or below which an entry counts as zero.

    ``atol`` is relative to the largest entry of ``matrix`` so that uniformly
    small but regular matrices keep their pivots.  Exact fields use no
    tolerance at all.
    """

    field = matrix.field
    if field.exact:
        return 0.0
    magnitudes = (float(field.abs(v)) for v in matrix.to_list())
    largest = max((m for m in magnitudes if math.isfinite(m)), default=0.0)
    return atol * largest


def _negligible(field: Field, value: Any, threshold: float) -> bool:
    if field.exact:
        return field.is_zero(value)
    return field.abs(value) <= threshold


def eliminate(
    matrix: BaseMatrix,
    companions: Sequence[BaseMatrix] = (),
    reduced: bool = False,
    atol: float = ATOL,
) -> Elimination:
    """Run forward (or Gauss-Jordan when ``reduced``) elimination.

    ``companions`` share the row count of ``matrix`` and receive the same row
    operations, which is how the inverse and the right-hand side of a linear
    system are produced.
    """

    for extra in companions:
        if extra.rows != matrix.rows:
            raise DimensionMismatchError("companion matrices must have the same number of rows")
    field = matrix.field
    work = matrix.to_mutable()
    extras = [extra.to_mutable() for extra in companions]
    result = Elimination(matrix=Matrix.zero(0, 0, field))
    threshold = _threshold(matrix, atol)
    pivot_row = 0

    for column in range(work.columns):
        if pivot_row >= work.rows:
            break
        best = max(range(pivot_row, work.rows), key=lambda r: field.abs(work.get(column, r)))
        if _negligible(field, work.get(column, best), threshold):
            continue
        if best != pivot_row:
            work.swap_rows(best, pivot_row)
            for extra in extras:
                extra.swap_rows(best, pivot_row)
            result.swaps += 1

        pivot = work.get(column, pivot_row)
        result.pivots.append(pivot)
        result.pivot_columns.append(column)
        scale = field.inverse(pivot)

        if reduced and field.is_finite(scale):
            work.multiply_row(pivot_row, scale)
            for extra in extras:
                extra.multiply_row(pivot_row, scale)
            lead = field.ONE
        else:
            lead = pivot

        targets = range(work.rows) if reduced else range(pivot_row + 1, work.rows)
        for r in targets:
            if r == pivot_row:
                continue
            entry = work.get(column, r)
            if field.is_zero(entry):
                continue
            factor = -(entry / lead)
            work.add_rows(pivot_row, r, factor)
            work.set_value(column, r, field.ZERO)
            for extra in extras:
                extra.add_rows(pivot_row, r, factor)
        pivot_row += 1

    result.matrix = work.copy()
    result.companions = [extra.copy() for extra in extras]
    return result


def row_echelon(matrix: BaseMatrix, atol: float = ATOL) -> Elimination:
    return eliminate(matrix, atol=atol)


def rank(matrix: BaseMatrix, atol: float = ATOL) -> int:
    """Number of non-zero rows of the row-echelon form."""

    echelon = row_echelon(matrix, atol).matrix
    field = matrix.field
    threshold = _threshold(matrix, atol)
    return sum(
        1 for row in echelon.row_vectors if not all(_negligible(field, v, threshold) for v in row)
    )


def pivot_determinant(matrix: BaseMatrix, atol: float = ATOL) -> Any:
    """Product of the elimination pivots, negated once per row swap."""

    if not matrix.is_square:
        raise InvalidOperationError("the pivot determinant needs a square matrix")
    field = matrix.field
    result = row_echelon(matrix, atol)
    if result.rank < matrix.rows:
        return field.ZERO
    det = field.ONE
    for pivot in result.pivots:
        det = det * pivot
    return -det if result.swaps % 2 else det


def inverse(matrix: BaseMatrix, atol: float = ATOL) -> Matrix:
    """Gauss-Jordan inverse using an identity companion."""

    if not matrix.is_square:
        raise SingularMatrixError(f"a {matrix.columns}x{matrix.rows} matrix has no inverse")
    result = eliminate(matrix, [Matrix.identity(matrix.rows, matrix.field)], reduced=True, atol=atol)
    if result.rank < matrix.rows:
        raise SingularMatrixError("matrix is singular")
    return result.companions[0]


def solve(matrix: BaseMatrix, rhs: BaseVector, atol: float = ATOL) -> Tuple[bool, Vector]:
    """Solve ``matrix @ x == rhs``.

    Returns ``(ok, x)``.  ``ok`` is false when the system is singular or the
    solution is not finite; ``x`` is the best-effort solution with free
    variables set to zero.
    """

    if not matrix.is_square or len(rhs) != matrix.rows:
        raise DimensionMismatchError(
            f"cannot solve a {matrix.columns}x{matrix.rows} system for a vector of size {len(rhs)}"
        )
    field = matrix.field
    column = Matrix(1, len(rhs), rhs, field)
    result = eliminate(matrix, [column], reduced=True, atol=atol)
    reduced_rhs = result.companions[0]
    solution = [field.ZERO] * matrix.columns
    for row, col in enumerate(result.pivot_columns):
        solution[col] = reduced_rhs.get(0, row)
    vector = Vector._wrap(solution, field)
    ok = result.rank == matrix.columns and vector.is_finite()
    return ok, vector
