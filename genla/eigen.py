"""Eigen-decomposition by shifted inverse iteration.

For a shift ``σ`` the iteration repeatedly applies ``B = (A - σI)⁻¹`` and
converges towards the eigenvector whose eigenvalue lies closest to ``σ``.
Every discovered eigenvalue becomes the next shift.  To make sure the next
pair is a new one the iterates are kept orthogonal to the span of the vectors
already found (their orthonormalised Schur basis); on that complement ``B``
acts like the inverse of the remaining block of ``A``, so its eigenvalues are
exactly the ones not found yet.  The Schur vector is then polished into an
eigenvector of ``A`` by a short unprojected iteration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np

from .config import (
    EIGEN_EQUALITY_TOLERANCE,
    EIGEN_MAX_ITERATIONS,
    EIGEN_TOLERANCE,
    SEED,
    SHIFT_NUDGE,
    SHIFT_RETRY,
)
from .errors import InvalidOperationError, SingularMatrixError
from .field import Field
from .matrix import BaseMatrix, Matrix
from .vector import Vector

logger = logging.getLogger(__name__)

MAX_SHIFT_RETRIES = 16


@dataclass
class InverseIteration:
    """Configurable shifted inverse-iteration eigensolver.

    ``tolerance`` bounds the largest component difference between successive
    iterates, ``equality_tolerance`` merges eigenvalues that are reported
    more than once.  Pass ``rng`` to share a random source, otherwise one is
    seeded from ``seed``.
    """

    tolerance: float = EIGEN_TOLERANCE
    max_iterations: int = EIGEN_MAX_ITERATIONS
    shift_nudge: float = SHIFT_NUDGE
    retry_offset: float = SHIFT_RETRY
    equality_tolerance: float = EIGEN_EQUALITY_TOLERANCE
    seed: Optional[int] = SEED
    rng: Optional[np.random.Generator] = None

    def __post_init__(self) -> None:
        if self.rng is None:
            self.rng = np.random.default_rng(self.seed)

    # -- public API --------------------------------------------------------

    def pairs(self, matrix: BaseMatrix) -> List[Tuple[Vector, Any]]:
        """All ``(eigenvector, eigenvalue)`` pairs, repeated eigenvalues included."""

        if not matrix.is_square:
            raise InvalidOperationError("eigenvalues are not defined for non-square matrices")
        field = matrix.field
        size = matrix.columns
        if size == 0:
            return []
        if matrix.is_diagonal():
            return [(Vector.unit(size, i, field), matrix.get(i, i)) for i in range(size)]

        schur: List[Vector] = []
        found: List[Tuple[Vector, Any]] = []
        shift = field.ZERO
        for index in range(size):
            basis_vector, value = self._iterate(matrix, shift, schur)
            vector = self._polish(matrix, value, basis_vector)
            logger.debug("eigenpair %d: value=%s shift=%s", index, value, shift)
            found.append((vector, value))
            schur.append(basis_vector)
            shift = self._nudge(field, value)
        return found

    def decompose(self, matrix: BaseMatrix) -> Tuple[List[Vector], List[Any]]:
        """Distinct unit eigenvectors and distinct eigenvalues (descending)."""

        pairs = self.pairs(matrix)
        field = matrix.field
        close = field.close
        eps = self.equality_tolerance

        vectors: List[Vector] = []
        for vector, _ in pairs:
            if not any(vector.is_close(other, eps) for other in vectors):
                vectors.append(vector)

        values: List[Any] = []
        for _, value in pairs:
            if not any(close(value, other, eps) for other in values):
                values.append(value)
        values.sort(key=field.sort_key, reverse=True)
        return vectors, values

    # -- internals ---------------------------------------------------------

    def _nudge(self, field: Field, value: Any, offset: Optional[float] = None) -> Any:
        offset = self.shift_nudge if offset is None else offset
        return value + field.coerce(offset * (1 + float(field.abs(value))))

    def _shifted_inverse(self, matrix: BaseMatrix, shift: Any) -> Tuple[Matrix, Any]:
        field = matrix.field
        for _ in range(MAX_SHIFT_RETRIES):
            try:
                return (matrix - shift).inverse(), shift
            except SingularMatrixError:
                logger.debug("shift %s hits an eigenvalue, nudging", shift)
                shift = self._nudge(field, shift)
        raise SingularMatrixError(f"no regular shift found near {shift}")

    def _random_vector(self, field: Field, size: int) -> Vector:
        return Vector._wrap([field.random(self.rng) for _ in range(size)], field)

    def _project(self, vector: Vector, basis: List[Vector]) -> Vector:
        field = vector.field
        for q in basis:
            coefficient = Vector._wrap([field.conjugate(x) for x in q], field).dot(vector)
            vector = vector - q * coefficient
        return vector

    def _rescale(self, vector: Vector) -> Vector:
        """Divide by the first component of (almost) largest magnitude."""

        field = vector.field
        magnitudes = [float(field.abs(x)) for x in vector]
        largest = max(magnitudes)
        if largest == 0.0:
            return vector
        # Ties up to rounding noise go to the lowest index, otherwise the sign
        # of the iterates could flip between equal-magnitude components.
        index = next(i for i, m in enumerate(magnitudes) if m >= largest * (1 - 1e-9))
        return vector * field.inverse(vector[index])

    def _probe(self, field: Field, vector: Vector) -> Vector:
        for _ in range(100):
            probe = self._random_vector(field, len(vector))
            if field.abs(probe.dot(vector)) > self.tolerance:
                return probe
        return Vector._wrap([field.conjugate(x) for x in vector], field)

    def _converged(self, previous: Vector, current: Vector) -> bool:
        field = current.field
        return all(field.abs(a - b) <= self.tolerance for a, b in zip(previous, current))

    def _run(self, matrix: BaseMatrix, shift: Any, start: Vector, basis: List[Vector]) -> Tuple[Vector, Any]:
        field = matrix.field
        # A shift halfway between two eigenvalues makes the iterates oscillate;
        # half of the budget is spent on a moved shift in that case.
        budget = max(1, self.max_iterations // 2)
        for attempt in range(2):
            inverse, shift = self._shifted_inverse(matrix, shift)
            current = self._rescale(self._project(start, basis))
            converged = False
            for iteration in range(budget):
                following = self._rescale(self._project(inverse @ current, basis))
                if self._converged(current, following):
                    converged = True
                    logger.debug("converged after %d iterations (shift %s)", iteration + 1, shift)
                    current = following
                    break
                current = following
            if converged:
                break
            if attempt == 0:
                logger.debug("no convergence at shift %s, moving it", shift)
                shift = self._nudge(field, shift, self.retry_offset)
        else:
            logger.warning(
                "inverse iteration did not converge within %d iterations (shift %s)",
                self.max_iterations,
                shift,
            )

        image = self._project(inverse @ current, basis)
        probe = self._probe(field, current)
        ratio = probe.dot(image) * field.inverse(probe.dot(current))
        value = field.inverse(ratio) + shift
        return current.normalized(), value

    def _iterate(self, matrix: BaseMatrix, shift: Any, schur: List[Vector]) -> Tuple[Vector, Any]:
        start = self._random_vector(matrix.field, matrix.columns)
        vector, value = self._run(matrix, shift, start, schur)
        # Orthonormalise against the Schur basis gathered so far.
        vector = self._project(vector, schur).normalized()
        return vector, value

    def _polish(self, matrix: BaseMatrix, value: Any, start: Vector) -> Vector:
        field = matrix.field
        if (matrix @ start).is_close(start * value, max(self.equality_tolerance, self.tolerance)):
            return start
        vector, _ = self._run(matrix, self._nudge(field, value), start, [])
        return vector
