from __future__ import annotations

from fractions import Fraction

import numpy as np
import pytest

from genla.errors import DimensionMismatchError, InvalidOperationError
from genla.field import COMPLEX, RATIONAL
from genla.matrix import Matrix, MutableMatrix
from genla.vector import Vector


def grid(*rows) -> Matrix:
    return Matrix.from_grid(rows)


def random_matrix(size: int, seed: int = 7) -> Matrix:
    rng = np.random.default_rng(seed)
    return Matrix.from_numpy(rng.uniform(-2.0, 2.0, size=(size, size)))


def test_indexing_is_column_then_row():
    m = grid([1, 2, 3], [4, 5, 6])
    assert m.shape == (3, 2)
    assert m[0, 1] == 4
    assert m[2, 0] == 3
    assert m[1] == Vector([2, 5])
    assert m.row(1) == Vector([4, 5, 6])
    assert m[1:3, 0:1] == grid([2, 3])
    with pytest.raises(IndexError):
        m[3, 0]


def test_constructor_checks_coefficient_count():
    with pytest.raises(DimensionMismatchError):
        Matrix(2, 2, [1, 2, 3])
    with pytest.raises(DimensionMismatchError):
        grid([1, 2], [3])


def test_factories():
    assert Matrix.identity(2) == grid([1, 0], [0, 1])
    assert Matrix.scale(3, 2, 5) == grid([5, 0, 0], [0, 5, 0])
    assert Matrix.diagonal([1, 2]) == grid([1, 0], [0, 2])
    assert Matrix.from_columns([Vector([1, 2]), Vector([3, 4])]) == grid([1, 3], [2, 4])
    assert Matrix.from_rows([Vector([1, 2]), Vector([3, 4])]) == grid([1, 2], [3, 4])
    assert Matrix.sparse(2, 2, [(1, 0, 7)]) == grid([0, 7], [0, 0])
    assert Matrix.zero(2, 3).shape == (2, 3)
    with pytest.raises(IndexError):
        Matrix.sparse(2, 2, [(2, 0, 1)])


def test_numpy_round_trip():
    array = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
    m = Matrix.from_numpy(array)
    assert m.shape == (3, 2)
    assert np.array_equal(m.to_numpy(), array)


def test_products_match_numpy():
    a = grid([1, 2, 3], [4, 5, 6])
    b = grid([1, 0], [2, 1], [0, 3])
    assert np.allclose((a @ b).to_numpy(), a.to_numpy() @ b.to_numpy())
    assert a @ Vector([1, 1, 1]) == Vector([6, 15])
    assert Vector([1, 1]) @ a == Vector([5, 7, 9])
    with pytest.raises(DimensionMismatchError):
        a @ a


def test_scalar_addition_acts_on_diagonal():
    m = grid([1, 2], [3, 4])
    assert m + 1 == grid([2, 2], [3, 5])
    assert m - 1 == grid([0, 2], [3, 3])
    assert 1 - m == grid([0, -2], [-3, -3])
    assert m * 2 == grid([2, 4], [6, 8])
    assert m / 2 == grid([0.5, 1], [1.5, 2])
    assert m % 2 == grid([1, 0], [1, 0])
    assert m + m == m * 2
    assert m - m == Matrix.zero(2)


def test_power():
    m = grid([1, 1], [0, 1])
    assert m ** 0 == Matrix.identity(2)
    assert m ** 5 == grid([1, 5], [0, 1])
    assert (m ** -2).is_close(grid([1, -2], [0, 1]))
    with pytest.raises(InvalidOperationError):
        grid([1, 2, 3]) ** 2


def test_componentwise_and_lerp():
    a = grid([1, 2], [3, 4])
    b = grid([2, 2], [2, 2])
    assert a.componentwise_multiply(b) == grid([2, 4], [6, 8])
    assert a.componentwise_divide(b) == grid([0.5, 1], [1.5, 2])
    assert a.lerp(b, 0.5) == grid([1.5, 2], [2.5, 3])


def test_structure_helpers():
    m = grid([1, 2, 3], [4, 5, 6], [7, 8, 10])
    assert m.transposed() == grid([1, 4, 7], [2, 5, 8], [3, 6, 10])
    assert m.main_diagonal == Vector([1, 5, 10])
    assert m.trace == 16
    assert m.minor(0, 0) == grid([5, 6], [8, 10])
    assert m.minor(1, 2) == grid([1, 3], [4, 6])
    subs = m.principal_submatrices()
    assert [s.shape for s in subs] == [(1, 1), (2, 2)]
    assert subs[1] == grid([1, 2], [4, 5])


def test_determinant_closed_forms():
    assert grid([3]).determinant() == 3
    assert grid([4, 7], [2, 6]).determinant() == 10
    assert grid([1, 2, 3], [4, 5, 6], [7, 8, 10]).determinant() == pytest.approx(-3)


@pytest.mark.parametrize("size", [4, 5])
def test_laplace_determinant_matches_numpy(size):
    m = random_matrix(size)
    assert np.isclose(m.determinant(), np.linalg.det(m.to_numpy()))


def test_non_square_determinant_uses_gram_matrix():
    m = grid([1, 0], [0, 2], [0, 0])
    assert m.determinant() == pytest.approx(2.0)


def test_rational_determinant_is_exact():
    m = Matrix.from_grid([[Fraction(1, 2), 1, 0, 0], [0, 1, 2, 0], [0, 0, 1, 3], [1, 0, 0, 1]], RATIONAL)
    assert m.determinant() == Fraction(-11, 2)
    assert m.determinant() == m.pivot_determinant()


def test_orthonormal_basis_of_identity():
    assert Matrix.identity(3).orthonormal_basis() == Matrix.identity(3)


def test_orthonormal_basis_is_orthonormal():
    q = random_matrix(4, seed=11).orthonormal_basis()
    assert (q.transposed() @ q).is_identity(1e-9)
    assert q.is_orthogonal()


def test_iwasawa_decomposition_reconstructs_matrix():
    m = random_matrix(3, seed=5)
    u, d = m.iwasawa_decompose()
    assert (u @ d).is_close(m, 1e-9)
    assert d.is_upper_triangular(1e-9)


def test_predicates():
    assert Matrix.identity(3).is_identity()
    assert Matrix.zero(2).is_zero()
    assert Matrix.diagonal([1, 2]).is_diagonal()
    assert grid([1, 2], [0, 3]).is_upper_triangular()
    assert not grid([1, 2], [0, 3]).is_lower_triangular()
    assert grid([1, 2], [2, 1]).is_symmetric()
    assert grid([0, 2], [-2, 0]).is_skew_symmetric()
    assert grid([0, 2], [-2, 0]).is_hollow()
    assert grid([1, 0], [0, 0]).is_projection()
    assert grid([0, 1], [1, 0]).is_involutory()
    assert grid([0, 1], [1, 0]).is_orthogonal()
    assert grid([1, 2], [3, 4]).is_invertible()
    assert not grid([1, 2], [2, 4]).is_invertible()
    assert Matrix.diagonal([1, -1, 0]).is_sign_matrix()
    assert not Matrix.diagonal([1, -1, 0]).is_signature_matrix()
    assert Matrix.diagonal([1, -1, 1]).is_signature_matrix()
    assert grid([0, 1, 1, 1], [-1, 0, 1, -1], [-1, -1, 0, 1], [-1, 1, -1, 0]).is_conference_matrix()
    assert not grid([1, 2], [3, 4]).is_conference_matrix()
    assert grid([2, -1], [-1, 2]).is_positive_definite()
    assert not grid([1, 2], [2, 1]).is_positive_definite()
    assert grid([2, 1], [1, 2]).is_hurwitz_stable()
    assert not grid([1, 2], [3, 4]).has_nans()
    assert (grid([1, 0], [0, 1]) / 0).has_nans()


def test_row_and_column_primitives_return_new_matrices():
    m = grid([1, 2], [3, 4])
    assert m.swap_rows(0, 1) == grid([3, 4], [1, 2])
    assert m.multiply_row(1, 2) == grid([1, 2], [6, 8])
    assert m.add_rows(0, 1, -3) == grid([1, 2], [0, -2])
    assert m.swap_columns(0, 1) == grid([2, 1], [4, 3])
    assert m.multiply_column(0, 3) == grid([3, 2], [9, 4])
    assert m.add_columns(0, 1, -2) == grid([1, 0], [3, -2])
    assert m.set_value(1, 0, 9) == grid([1, 9], [3, 4])
    assert m.set_row(0, [5, 6]) == grid([5, 6], [3, 4])
    assert m.set_column(1, [7, 8]) == grid([1, 7], [3, 8])
    assert m == grid([1, 2], [3, 4])


def test_mutable_matrix_works_in_place():
    m = MutableMatrix.identity(3)
    assert m.swap_rows(0, 2) is m
    m[1, 1] = 5
    m.set_region(0, 0, grid([7]))
    assert m == grid([7, 0, 1], [0, 5, 0], [1, 0, 0])
    with pytest.raises(TypeError):
        hash(m)
    frozen = m.copy()
    m.multiply_row(0, 0)
    assert frozen.row(0) == Vector([7, 0, 1])


def test_immutable_matrix_is_hashable():
    assert hash(grid([1, 2])) == hash(grid([1.0, 2.0]))


def test_characteristic_polynomial_of_diagonal():
    poly = Matrix.diagonal([2, 3]).characteristic_polynomial()
    assert np.allclose(poly.coef, [6, -5, 1])


def test_singular_values_of_diagonal():
    values = Matrix.diagonal([3, -4]).singular_values()
    assert np.allclose(sorted(values), [3, 4])


def test_complex_iwasawa_decomposition_reconstructs_matrix():
    m = Matrix.from_grid([[1j, 1], [1, 2]], COMPLEX)
    u, d = m.iwasawa_decompose()
    assert u.is_orthogonal(1e-9)
    assert (u @ d).is_close(m, 1e-9)
    assert d.is_upper_triangular(1e-9)


def test_dependent_column_gives_zero_basis_vector():
    q = grid([1, 2, 0], [1, 2, 1], [0, 0, 1]).orthonormal_basis()
    assert q.column(1).is_zero()
    assert q.column(0).is_close(Vector([2 ** -0.5, 2 ** -0.5, 0]))
    assert q.column(2).is_normalized()
    assert q.column(0).is_orthogonal(q.column(2))


def test_dependent_rational_column_gives_zero_basis_vector():
    m = Matrix.from_grid([[1, 2], [0, 0]], RATIONAL)
    assert m.orthonormal_basis().column(1).is_zero()
