"""Fixed-size vectors over an abstract scalar field.

Two concrete types share :class:`BaseVector`:

* :class:`Vector` is an immutable, hashable value.  Every operation returns a
  new instance.
* :class:`MutableVector` owns a private ``list`` and its setters
  (:meth:`~BaseVector.with_entry`, :meth:`~BaseVector.with_entries`,
  :meth:`~BaseVector.swap_entries`, ``v[i] = x``) write into it and return
  ``self``.

Arithmetic always produces an immutable :class:`Vector`.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.polynomial import Polynomial

from .config import ATOL
from .errors import DimensionMismatchError, InvalidOperationError
from .field import REAL, Field


class BaseVector:
    """Behaviour shared by the immutable and the mutable vector."""

    __slots__ = ("field", "_values")

    def __init__(self, values: Iterable[Any] = (), field: Field = REAL) -> None:
        self.field = field
        self._values = self._store([field.coerce(v) for v in values])

    @staticmethod
    def _store(values: List[Any]) -> Sequence[Any]:
        raise NotImplementedError

    @classmethod
    def _wrap(cls, values: Sequence[Any], field: Field) -> "BaseVector":
        vec = cls.__new__(cls)
        vec.field = field
        vec._values = cls._store(list(values))
        return vec

    # -- factories -------------------------------------------------------

    @classmethod
    def zero(cls, size: int, field: Field = REAL) -> "BaseVector":
        return cls._wrap([field.ZERO] * size, field)

    @classmethod
    def filled(cls, size: int, value: Any, field: Field = REAL) -> "BaseVector":
        return cls._wrap([field.coerce(value)] * size, field)

    @classmethod
    def of(cls, *values: Any, field: Field = REAL) -> "BaseVector":
        return cls(values, field)

    @classmethod
    def unit(cls, size: int, index: int, field: Field = REAL) -> "BaseVector":
        values = [field.ZERO] * size
        values[index] = field.ONE
        return cls._wrap(values, field)

    # -- container protocol ----------------------------------------------

    @property
    def size(self) -> int:
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __getitem__(self, index: Union[int, slice]) -> Any:
        if isinstance(index, slice):
            return Vector._wrap(self._values[index], self.field)
        return self._values[index]

    def to_list(self) -> List[Any]:
        return list(self._values)

    def to_numpy(self) -> np.ndarray:
        return np.array(self._values, dtype=self.field.dtype)

    def to_polynomial(self) -> Polynomial:
        """Interpret the components as ascending polynomial coefficients."""

        return Polynomial(self.to_numpy())

    def copy(self) -> "Vector":
        return Vector._wrap(self._values, self.field)

    def to_mutable(self) -> "MutableVector":
        return MutableVector._wrap(self._values, self.field)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BaseVector):
            return NotImplemented
        return len(self) == len(other) and all(a == b for a, b in zip(self._values, other._values))

    def __repr__(self) -> str:
        inner = ", ".join(repr(v) for v in self._values)
        return f"{type(self).__name__}([{inner}])"

    def __str__(self) -> str:
        return "(" + ", ".join(str(v) for v in self._values) + ")"

    # -- in-place hooks ----------------------------------------------------

    def _target(self) -> List[Any]:
        return list(self._values)

    def _finish(self, values: List[Any]) -> "BaseVector":
        return Vector._wrap(values, self.field)

    def with_entry(self, index: int, value: Any) -> "BaseVector":
        if not -len(self) <= index < len(self):
            raise IndexError(f"component index {index} out of range for size {len(self)}")
        target = self._target()
        target[index] = self.field.coerce(value)
        return self._finish(target)

    def with_entries(self, start: int, values: Iterable[Any]) -> "BaseVector":
        """Overwrite the components starting at ``start`` with ``values``."""

        values = [self.field.coerce(v) for v in values]
        if start < 0 or start + len(values) > len(self):
            raise IndexError("entries exceed vector bounds")
        target = self._target()
        target[start : start + len(values)] = values
        return self._finish(target)

    def swap_entries(self, first: int, second: int) -> "BaseVector":
        target = self._target()
        target[first], target[second] = target[second], target[first]
        return self._finish(target)

    # -- arithmetic --------------------------------------------------------

    def _check_size(self, other: "BaseVector") -> None:
        if len(self) != len(other):
            raise DimensionMismatchError(f"vector sizes {len(self)} and {len(other)} differ")

    def _map(self, func) -> "Vector":
        return Vector._wrap([func(v) for v in self._values], self.field)

    def _zip(self, other: "BaseVector", func) -> "Vector":
        self._check_size(other)
        return Vector._wrap([func(a, b) for a, b in zip(self._values, other._values)], self.field)

    def __neg__(self) -> "Vector":
        return self._map(lambda v: -v)

    def __pos__(self) -> "Vector":
        return self.copy()

    def __add__(self, other: Any) -> "Vector":
        if not isinstance(other, BaseVector):
            return NotImplemented
        return self._zip(other, lambda a, b: a + b)

    def __sub__(self, other: Any) -> "Vector":
        if not isinstance(other, BaseVector):
            return NotImplemented
        return self._zip(other, lambda a, b: a - b)

    def __mul__(self, factor: Any) -> "Vector":
        if isinstance(factor, BaseVector):
            return NotImplemented
        factor = self.field.coerce(factor)
        return self._map(lambda v: v * factor)

    def __rmul__(self, factor: Any) -> "Vector":
        return self.__mul__(factor)

    def __truediv__(self, factor: Any) -> "Vector":
        if isinstance(factor, BaseVector):
            return NotImplemented
        return self * self.field.inverse(self.field.coerce(factor))

    def __mod__(self, factor: Any) -> "Vector":
        factor = self.field.coerce(factor)
        return self._map(lambda v: v % factor)

    def __matmul__(self, other: Any) -> Any:
        if isinstance(other, BaseVector):
            return self.dot(other)
        return NotImplemented

    def dot(self, other: "BaseVector") -> Any:
        self._check_size(other)
        total = self.field.ZERO
        for a, b in zip(self._values, other._values):
            total = total + a * b
        return total

    def componentwise_multiply(self, other: "BaseVector") -> "Vector":
        return self._zip(other, lambda a, b: a * b)

    def componentwise_divide(self, other: "BaseVector") -> "Vector":
        inverse = self.field.inverse
        return self._zip(other, lambda a, b: a * inverse(b))

    def componentwise_abs(self) -> "Vector":
        return self._map(lambda v: self.field.coerce(self.field.abs(v)))

    def componentwise_sqrt(self) -> "Vector":
        return self._map(self.field.sqrt)

    def componentwise_power(self, exponent: int) -> "Vector":
        return self._map(lambda v: _power(self.field, v, exponent))

    def lerp(self, other: "BaseVector", factor: Any) -> "Vector":
        factor = self.field.coerce(factor)
        return self._zip(other, lambda a, b: a + (b - a) * factor)

    def clamp(self, low: Any, high: Any) -> "Vector":
        key = self.field.sort_key
        low = self.field.coerce(low)
        high = self.field.coerce(high)

        def clip(v):
            if key(v) < key(low):
                return low
            if key(v) > key(high):
                return high
            return v

        return self._map(clip)

    def normalize_min_max(self) -> "Vector":
        """Affinely rescale the components onto ``[0, 1]``."""

        low = self.min()
        span = self.max() - low
        if self.field.is_zero(span):
            return Vector.zero(len(self), self.field)
        inverse = self.field.inverse(span)
        return self._map(lambda v: (v - low) * inverse)

    # -- reductions --------------------------------------------------------

    def sum(self) -> Any:
        total = self.field.ZERO
        for v in self._values:
            total = total + v
        return total

    def min(self) -> Any:
        return min(self._values, key=self.field.sort_key)

    def max(self) -> Any:
        return max(self._values, key=self.field.sort_key)

    def avg(self) -> Any:
        return self.sum() * self.field.inverse(self.field.coerce(len(self)))

    @property
    def squared_norm(self) -> Any:
        conjugate = self.field.conjugate
        total = self.field.ZERO
        for v in self._values:
            total = total + v * conjugate(v)
        return total

    @property
    def length(self) -> Any:
        return self.field.sqrt(self.squared_norm)

    def normalized(self) -> "Vector":
        if self.is_zero():
            return self.copy()
        return self / self.length

    def is_normalized(self, tolerance: float = ATOL) -> bool:
        return self.field.close(self.squared_norm, self.field.ONE, tolerance)

    def is_zero(self) -> bool:
        return all(self.field.is_zero(v) for v in self._values)

    def is_finite(self) -> bool:
        return all(self.field.is_finite(v) for v in self._values)

    def is_close(self, other: "BaseVector", tolerance: float = ATOL) -> bool:
        if len(self) != len(other):
            return False
        close = self.field.close
        return all(close(a, b, tolerance) for a, b in zip(self._values, other._values))

    def distance_to(self, other: "BaseVector") -> Any:
        return (self - other).length

    def is_orthogonal(self, other: "BaseVector", tolerance: float = ATOL) -> bool:
        return self.field.abs(self.dot(other)) <= tolerance

    # -- geometry ----------------------------------------------------------

    def reflect(self, normal: "BaseVector") -> "Vector":
        theta = self.dot(normal)
        return normal * (theta + theta) - self

    def refract(self, normal: "BaseVector", eta: Any) -> Tuple[bool, "Vector"]:
        """Refract at ``normal`` with refractive index ratio ``eta``.

        Returns ``(total_reflection, vector)``.  On total internal reflection
        ``vector`` is the reflection at the negated normal.
        """

        one = self.field.ONE
        eta = self.field.coerce(eta)
        theta = self.dot(normal)
        k = one - eta * eta * (one - theta * theta)
        if self.field.is_negative(k):
            return True, self.reflect(-normal)
        return False, self * eta + normal * (eta * theta - self.field.sqrt(k))

    def outer_product(self, other: "BaseVector") -> "Matrix":
        """Square matrix with ``M[c, r] = other[r] * other[c]``."""

        from .matrix import Matrix

        size = len(other)
        values = [other[r] * other[c] for r in range(size) for c in range(size)]
        return Matrix._wrap(size, size, values, self.field)

    @property
    def householder_matrix(self) -> "Matrix":
        if self.is_zero():
            raise InvalidOperationError("the Householder matrix of the zero vector is undefined")
        return self.outer_product(self) * self.field.coerce(2) / self.squared_norm

    def as_diagonal_matrix(self) -> "Matrix":
        from .matrix import Matrix

        return Matrix.diagonal(self._values, field=self.field)

    def transposed(self) -> "Matrix":
        """The vector as a single-row matrix."""

        from .matrix import Matrix

        return Matrix._wrap(len(self), 1, list(self._values), self.field)

    # -- linear dependence -----------------------------------------------

    def linear_factor(self, other: "BaseVector", tolerance: float = ATOL) -> Optional[Any]:
        """Return ``f`` with ``other == self * f`` or ``None``.

        Zero vectors are never considered dependent.
        """

        self._check_size(other)
        if self.is_zero() or other.is_zero():
            return None
        field = self.field
        factor = None
        for a, b in zip(self._values, other._values):
            if field.is_zero(a):
                if not field.is_zero(b):
                    return None
                continue
            ratio = b / a
            if factor is None:
                factor = ratio
            elif not field.close(ratio, factor, tolerance):
                return None
        return factor

    def is_linear_dependent(self, other: "BaseVector", tolerance: float = ATOL) -> bool:
        return self.linear_factor(other, tolerance) is not None

    # -- resizing ----------------------------------------------------------

    def resize(self, size: int) -> "Vector":
        if size < 0:
            raise ValueError("size must be non-negative")
        values = list(self._values[:size])
        values.extend([self.field.ZERO] * (size - len(values)))
        return Vector._wrap(values, self.field)

    def minor(self, index: int) -> "Vector":
        if not 0 <= index < len(self):
            raise IndexError(f"component index {index} out of range for size {len(self)}")
        return Vector._wrap(self._values[:index] + self._values[index + 1 :], self.field)


class Vector(BaseVector):
    """Immutable vector."""

    __slots__ = ()

    @staticmethod
    def _store(values: List[Any]) -> Tuple[Any, ...]:
        return tuple(values)

    def __hash__(self) -> int:
        return hash((self.field, self._values))


class MutableVector(BaseVector):
    """Vector whose setters write into its own backing list."""

    __slots__ = ()
    __hash__ = None  # type: ignore[assignment]

    @staticmethod
    def _store(values: List[Any]) -> List[Any]:
        return values

    def _target(self) -> List[Any]:
        return self._values  # type: ignore[return-value]

    def _finish(self, values: List[Any]) -> "MutableVector":
        return self

    def __setitem__(self, index: int, value: Any) -> None:
        self.with_entry(index, value)


def _power(field: Field, base: Any, exponent: int) -> Any:
    """Square-and-multiply; negative exponents go through the inverse."""

    if exponent < 0:
        base = field.inverse(base)
        exponent = -exponent
    result = field.ONE
    while exponent:
        if exponent & 1:
            result = result * base
        base = base * base
        exponent >>= 1
    return result

