"""Vector spaces spanned by a greedily filtered basis."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional

from .config import ATOL, RESIDUAL_TOLERANCE
from .elimination import rank, solve
from .matrix import Matrix
from .vector import BaseVector, Vector


def independent_subset(vectors: Iterable[BaseVector], tolerance: float = ATOL) -> List[Vector]:
    """First-fit filter: keep non-zero vectors that are no multiple of a kept one.

    Only pairwise dependence is checked, so three coplanar vectors in
    three dimensions all survive.
    """

    result: List[Vector] = []
    for vector in vectors:
        if vector.is_zero():
            continue
        if all(not vector.is_linear_dependent(kept, tolerance) for kept in result):
            result.append(vector.copy())
    return result


class VectorSpace:
    """Span of the accepted vectors; ``dimension`` is the basis length."""

    def __init__(self, vectors: Iterable[BaseVector] = (), tolerance: float = ATOL) -> None:
        self.tolerance = tolerance
        self._basis = independent_subset(vectors, tolerance)

    @classmethod
    def from_vectors(cls, *vectors: BaseVector, tolerance: float = ATOL) -> "VectorSpace":
        return cls(vectors, tolerance)

    @property
    def basis(self) -> List[Vector]:
        return list(self._basis)

    @property
    def dimension(self) -> int:
        return len(self._basis)

    @property
    def is_empty(self) -> bool:
        return not self._basis

    def __len__(self) -> int:
        return len(self._basis)

    def __iter__(self) -> Iterator[Vector]:
        return iter(self._basis)

    def __repr__(self) -> str:
        return f"VectorSpace({self._basis!r})"

    def normalized(self) -> "VectorSpace":
        return VectorSpace((v.normalized() for v in self._basis), self.tolerance)

    def add(self, other: "VectorSpace") -> "VectorSpace":
        """Union of both bases, filtered again."""

        return VectorSpace(self._basis + other._basis, self.tolerance)

    __add__ = add

    def divide(self, other: "VectorSpace") -> "VectorSpace":
        """Drop basis vectors that are multiples of a vector of ``other``."""

        kept = [
            v for v in self._basis if all(not v.is_linear_dependent(b, self.tolerance) for b in other._basis)
        ]
        return VectorSpace(kept, self.tolerance)

    __truediv__ = divide

    def basis_matrix(self) -> Matrix:
        """The basis vectors as columns."""

        return Matrix.from_columns(self._basis)

    def contains(self, vector: BaseVector) -> bool:
        if self.is_empty:
            return vector.is_zero()
        basis = self.basis_matrix()
        extended = Matrix.from_columns(self._basis + [vector.copy()])
        return rank(basis, self.tolerance) == rank(extended, self.tolerance)

    __contains__ = contains

    def coordinates(self, vector: BaseVector) -> Optional[Vector]:
        """Coefficients ``c`` with ``basis_matrix() @ c == vector``, or ``None``.

        Solves the normal equations ``BᵀB c = Bᵀv``; a least-squares solution
        that does not reproduce ``vector`` means it lies outside the span.
        """

        if self.is_empty:
            return None
        basis = self.basis_matrix()
        transposed = basis.transposed()
        ok, coefficients = solve(transposed @ basis, transposed @ vector, self.tolerance)
        if not ok or not (basis @ coefficients).is_close(vector, RESIDUAL_TOLERANCE):
            return None
        return coefficients

    def __getitem__(self, coefficients: Any) -> Vector:
        """Linear combination of the basis with the given coefficients."""

        coefficients = list(coefficients)
        if len(coefficients) != self.dimension:
            raise IndexError(f"{len(coefficients)} coefficients for a space of dimension {self.dimension}")
        return self.basis_matrix() @ Vector(coefficients, self._basis[0].field)
