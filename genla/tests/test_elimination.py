from __future__ import annotations

import math
from fractions import Fraction

import numpy as np
import pytest

from genla.elimination import eliminate, inverse, pivot_determinant, rank, row_echelon, solve
from genla.errors import DimensionMismatchError, InvalidOperationError, SingularMatrixError
from genla.field import RATIONAL, ModularField
from genla.matrix import Matrix
from genla.vector import Vector


def grid(*rows) -> Matrix:
    return Matrix.from_grid(rows)


def random_matrices(count: int, size: int, seed: int = 2025):
    rng = np.random.default_rng(seed)
    return [Matrix.from_numpy(rng.normal(size=(size, size))) for _ in range(count)]


def test_inverse_of_two_by_two():
    result = grid([4, 7], [2, 6]).inverse()
    assert result.is_close(grid([0.6, -0.7], [-0.2, 0.4]))


@pytest.mark.parametrize("m", random_matrices(4, 4))
def test_inverse_properties(m):
    inv = inverse(m)
    assert (m @ inv).is_identity(1e-9)
    assert inverse(inv).is_close(m, 1e-8)


def test_inverse_needs_pivoting():
    m = grid([0, 1], [1, 0])
    assert inverse(m) == m


def test_singular_and_non_square_matrices_have_no_inverse():
    with pytest.raises(SingularMatrixError):
        inverse(grid([1, 2], [2, 4]))
    with pytest.raises(SingularMatrixError):
        inverse(grid([1, 2, 3], [4, 5, 6]))


def test_rational_inverse_is_exact():
    m = Matrix.from_grid([[2, 1], [1, 1]], RATIONAL)
    inv = m.inverse()
    assert inv == Matrix.from_grid([[1, -1], [-1, 2]], RATIONAL)
    assert m @ inv == Matrix.identity(2, RATIONAL)
    assert inverse(Matrix.from_grid([[Fraction(1, 3), 0], [0, 3]], RATIONAL)).get(0, 0) == 3


def test_modular_inverse():
    p = ModularField(7)
    m = Matrix.from_grid([[1, 2], [3, 4]], p)
    assert m @ m.inverse() == Matrix.identity(2, p)


def test_solve_diagonal_system():
    ok, x = solve(grid([2, 0], [0, 3]), Vector([4, 9]))
    assert ok
    assert x.is_close(Vector([2, 3]))


def test_solve_matches_numpy():
    m = grid([3, 2, -1], [2, -2, 4], [-1, 0.5, -1])
    b = Vector([1, -2, 0])
    ok, x = m.solve(b)
    assert ok
    assert np.allclose(x.to_numpy(), np.linalg.solve(m.to_numpy(), b.to_numpy()))


def test_solve_reports_singular_systems():
    ok, x = solve(grid([1, 2], [2, 4]), Vector([1, 2]))
    assert not ok
    assert len(x) == 2


def test_solve_checks_dimensions():
    with pytest.raises(DimensionMismatchError):
        solve(grid([1, 0], [0, 1]), Vector([1, 2, 3]))


def test_rank():
    assert rank(Matrix.identity(3)) == 3
    assert rank(grid([1, 2], [2, 4])) == 1
    assert rank(Matrix.zero(3, 2)) == 0
    assert rank(grid([1, 2, 3], [4, 5, 6], [7, 8, 9])) == 2
    assert grid([1, 2, 3], [2, 4, 6]).rank() == 1


@pytest.mark.parametrize(
    "m",
    [
        grid([1, 2, 3], [4, 5, 6]),
        grid([1, 2], [2, 4], [3, 6]),
        grid([0, 0, 1], [0, 0, 2]),
        grid([1, 2, 3], [4, 5, 6], [7, 8, 9]),
    ],
)
def test_rank_is_invariant_under_transposition(m):
    assert rank(m) == rank(m.transposed())


def test_row_echelon_form():
    result = row_echelon(grid([1, 2], [3, 4]))
    reduced = result.matrix
    assert reduced.is_upper_triangular()
    assert result.swaps == 1
    assert result.pivots == pytest.approx([3, 2 - 4 / 3])
    assert grid([1, 2], [3, 4]).row_echelon() == reduced


def test_gauss_jordan_with_companion():
    m = grid([2, 0], [0, 4])
    result = eliminate(m, [Matrix.identity(2)], reduced=True)
    assert result.matrix == Matrix.identity(2)
    assert result.companions[0] == grid([0.5, 0], [0, 0.25])


@pytest.mark.parametrize("m", random_matrices(3, 5, seed=9))
def test_pivot_determinant_matches_cofactor_expansion(m):
    assert math.isclose(pivot_determinant(m), m.determinant(), rel_tol=1e-9, abs_tol=1e-9)


def test_pivot_determinant_of_singular_matrix_is_zero():
    assert pivot_determinant(grid([1, 2], [2, 4])) == 0
    with pytest.raises(InvalidOperationError):
        pivot_determinant(grid([1, 2, 3]))


def test_tiny_rational_pivots_are_exact():
    m = Matrix.diagonal([Fraction(1, 10**12)] * 2, RATIONAL)
    assert rank(m) == 2
    assert m.inverse() == Matrix.diagonal([10**12] * 2, RATIONAL)
    assert m.pivot_determinant() == Fraction(1, 10**24)


def test_uniformly_small_real_matrix_is_regular():
    m = Matrix.identity(2) * 1e-10
    assert rank(m) == 2
    assert (m @ m.inverse()).is_identity(1e-9)
    ok, x = m.solve(Vector([1e-10, 2e-10]))
    assert ok
    assert x.is_close(Vector([1, 2]))


def test_rank_deficiency_is_relative_to_the_matrix_scale():
    assert rank(grid([1, 2], [2, 4]) * 1e-12) == 1
