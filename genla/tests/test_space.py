from __future__ import annotations

import pytest

from genla.matrix import Matrix
from genla.space import VectorSpace, independent_subset
from genla.vector import MutableVector, Vector


def vec(*values) -> Vector:
    return Vector(values)


def test_dependent_and_zero_vectors_are_dropped():
    space = VectorSpace([vec(1, 2, 3), vec(2, 4, 6), vec(0, 0, 0), vec(0, 1, 0)])
    assert space.basis == [vec(1, 2, 3), vec(0, 1, 0)]
    assert space.dimension == 2
    assert len(space) == 2


def test_filter_only_checks_pairs():
    coplanar = [vec(1, 0, 0), vec(0, 1, 0), vec(1, 1, 0)]
    assert len(independent_subset(coplanar)) == 3


def test_basis_is_decoupled_from_inputs():
    source = MutableVector([1, 0])
    space = VectorSpace.from_vectors(source)
    source[0] = 5
    assert space.basis == [vec(1, 0)]
    assert isinstance(space.basis[0], Vector)


def test_add_merges_bases():
    a = VectorSpace([vec(1, 0, 0)])
    b = VectorSpace([vec(2, 0, 0), vec(0, 0, 1)])
    assert (a + b).basis == [vec(1, 0, 0), vec(0, 0, 1)]
    assert a.add(b).dimension == 2


def test_divide_removes_shared_directions():
    a = VectorSpace([vec(1, 0), vec(0, 1)])
    b = VectorSpace([vec(0, 3)])
    assert (a / b).basis == [vec(1, 0)]
    assert a.divide(VectorSpace()).dimension == 2


def test_contains():
    plane = VectorSpace([vec(1, 0, 0), vec(0, 1, 0)])
    assert vec(3, -2, 0) in plane
    assert vec(0, 0, 0) in plane
    assert vec(0, 0, 1) not in plane
    assert not plane.contains(vec(1, 1, 1))


def test_empty_space():
    empty = VectorSpace()
    assert empty.is_empty
    assert empty.dimension == 0
    assert vec(0, 0) in empty
    assert vec(1, 0) not in empty
    assert empty.coordinates(vec(1, 0)) is None


def test_coordinates():
    space = VectorSpace([vec(1, 1, 0), vec(0, 1, 1)])
    coefficients = space.coordinates(vec(2, 5, 3))
    assert coefficients.is_close(vec(2, 3))
    assert space.coordinates(vec(1, 0, 0)) is None


def test_linear_combination():
    space = VectorSpace([vec(1, 1, 0), vec(0, 1, 1)])
    assert space[2, 3] == vec(2, 5, 3)
    with pytest.raises(IndexError):
        space[1, 2, 3]


def test_normalized_basis():
    space = VectorSpace([vec(3, 4), vec(0, 2)]).normalized()
    assert all(v.is_normalized() for v in space)
    assert space.basis[0].is_close(vec(0.6, 0.8))


def test_basis_matrix_has_basis_as_columns():
    space = VectorSpace([vec(1, 2), vec(3, 4)])
    assert space.basis_matrix() == Matrix.from_grid([[1, 3], [2, 4]])
