"""Scalar field contract consumed by the vector and matrix engine.

Scalars are ordinary Python values that implement the arithmetic operators
(``+``, ``-``, ``*``, ``/`` and unary ``-``).  Everything the operators cannot
express is supplied by a :class:`Field` instance: the additive and
multiplicative identities, magnitudes used for pivoting, square roots, finiteness
checks, random sampling and the fixed-width binary encoding used by
:class:`~genla.compressed.CompressedStorageFormat`.

Four reference fields are provided.  :data:`REAL` (``float``), :data:`COMPLEX`
(``complex``) and :data:`RATIONAL` (:class:`fractions.Fraction`) are
singletons; :class:`ModularField` is parameterised by its prime modulus and
operates on :class:`Residue` values.
"""

from __future__ import annotations

import cmath
import math
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Tuple

import numpy as np

from .config import BYTE_ORDER


class Field(ABC):
    """Abstract numeric field.

    Subclasses declare ``ZERO`` and ``ONE`` directly and implement
    :meth:`coerce`, :meth:`random`, :meth:`pack` and :meth:`unpack`.  The
    remaining hooks have defaults that are correct for exact fields.
    """

    ZERO: Any
    ONE: Any
    name: str = "field"
    nbytes: int = 0
    dtype: Any = object
    # Exact fields compare pivots and residuals against zero, not a tolerance.
    exact: bool = True

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        """Convert ``value`` into a scalar of this field."""

    @abstractmethod
    def random(self, rng: np.random.Generator) -> Any:
        """Draw a random, usually non-zero, scalar."""

    @abstractmethod
    def pack(self, value: Any) -> bytes:
        """Encode ``value`` into exactly :attr:`nbytes` bytes."""

    @abstractmethod
    def unpack(self, data: bytes) -> Any:
        """Decode a scalar previously produced by :meth:`pack`."""

    def abs(self, value: Any) -> Any:
        """Return a totally ordered magnitude of ``value``."""

        return abs(value)

    def sqrt(self, value: Any) -> Any:
        raise ArithmeticError(f"square roots are not defined in {self.name}")

    def inverse(self, value: Any) -> Any:
        return self.ONE / value

    def conjugate(self, value: Any) -> Any:
        return value

    def sort_key(self, value: Any) -> Any:
        return value

    def is_zero(self, value: Any) -> bool:
        return value == self.ZERO

    def is_one(self, value: Any) -> bool:
        return value == self.ONE

    def is_finite(self, value: Any) -> bool:
        return True

    def is_positive(self, value: Any) -> bool:
        return value > self.ZERO

    def is_negative(self, value: Any) -> bool:
        return value < self.ZERO

    def close(self, lhs: Any, rhs: Any, tolerance: Any) -> bool:
        return self.abs(lhs - rhs) <= tolerance

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RealField(Field):
    """IEEE double precision reals.

    Division by zero follows IEEE semantics: :meth:`inverse` returns an
    infinite sentinel and undefined results surface as NaN instead of raising.
    """

    ZERO = 0.0
    ONE = 1.0
    name = "real"
    nbytes = 8
    dtype = np.float64
    exact = False

    def coerce(self, value: Any) -> float:
        return float(value)

    def sqrt(self, value: float) -> float:
        return math.sqrt(value) if value >= 0 else math.nan

    def inverse(self, value: float) -> float:
        if value == 0:
            return math.copysign(math.inf, value)
        return 1.0 / value

    def is_finite(self, value: float) -> bool:
        return math.isfinite(value)

    def random(self, rng: np.random.Generator) -> float:
        return float(rng.uniform(-1.0, 1.0))

    def pack(self, value: float) -> bytes:
        return struct.pack(BYTE_ORDER + "d", value)

    def unpack(self, data: bytes) -> float:
        return struct.unpack(BYTE_ORDER + "d", data)[0]


class ComplexField(Field):
    """Complex numbers backed by two doubles."""

    ZERO = 0j
    ONE = 1 + 0j
    name = "complex"
    nbytes = 16
    dtype = np.complex128
    exact = False

    def coerce(self, value: Any) -> complex:
        return complex(value)

    def abs(self, value: complex) -> float:
        return abs(value)

    def sqrt(self, value: complex) -> complex:
        return cmath.sqrt(value)

    def inverse(self, value: complex) -> complex:
        if value == 0:
            return complex(math.inf, 0.0)
        return 1 / value

    def conjugate(self, value: complex) -> complex:
        return value.conjugate()

    def sort_key(self, value: complex) -> Tuple[float, float]:
        return (value.real, value.imag)

    def is_finite(self, value: complex) -> bool:
        return cmath.isfinite(value)

    def is_positive(self, value: complex) -> bool:
        return value.imag == 0 and value.real > 0

    def is_negative(self, value: complex) -> bool:
        return value.imag == 0 and value.real < 0

    def random(self, rng: np.random.Generator) -> complex:
        return complex(rng.uniform(-1.0, 1.0), rng.uniform(-1.0, 1.0))

    def pack(self, value: complex) -> bytes:
        return struct.pack(BYTE_ORDER + "dd", value.real, value.imag)

    def unpack(self, data: bytes) -> complex:
        real, imag = struct.unpack(BYTE_ORDER + "dd", data)
        return complex(real, imag)


class RationalField(Field):
    """Exact rationals using :class:`fractions.Fraction`.

    The binary form stores numerator and denominator as signed 64-bit
    integers; values outside that range cannot be serialised.
    """

    ZERO = Fraction(0)
    ONE = Fraction(1)
    name = "rational"
    nbytes = 16

    def coerce(self, value: Any) -> Fraction:
        return Fraction(value)

    def sqrt(self, value: Fraction) -> Fraction:
        if value < 0:
            raise ArithmeticError("square root of a negative rational")
        num = math.isqrt(value.numerator)
        den = math.isqrt(value.denominator)
        if num * num == value.numerator and den * den == value.denominator:
            return Fraction(num, den)
        return Fraction(math.sqrt(value))

    def random(self, rng: np.random.Generator) -> Fraction:
        numerator = int(rng.integers(1, 101)) * (1 if rng.integers(0, 2) else -1)
        return Fraction(numerator, int(rng.integers(1, 101)))

    def pack(self, value: Fraction) -> bytes:
        return struct.pack(BYTE_ORDER + "qq", value.numerator, value.denominator)

    def unpack(self, data: bytes) -> Fraction:
        numerator, denominator = struct.unpack(BYTE_ORDER + "qq", data)
        return Fraction(numerator, denominator)


@dataclass(frozen=True)
class Residue:
    """Element of the ring of integers modulo ``modulus``."""

    value: int
    modulus: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value % self.modulus)

    def _other(self, other: Any) -> int:
        if isinstance(other, Residue):
            if other.modulus != self.modulus:
                raise ValueError("residues of different moduli")
            return other.value
        if isinstance(other, int):
            return other
        return NotImplemented  # type: ignore[return-value]

    def __add__(self, other: Any) -> "Residue":
        value = self._other(other)
        if value is NotImplemented:
            return NotImplemented
        return Residue(self.value + value, self.modulus)

    __radd__ = __add__

    def __sub__(self, other: Any) -> "Residue":
        value = self._other(other)
        if value is NotImplemented:
            return NotImplemented
        return Residue(self.value - value, self.modulus)

    def __rsub__(self, other: Any) -> "Residue":
        value = self._other(other)
        if value is NotImplemented:
            return NotImplemented
        return Residue(value - self.value, self.modulus)

    def __mul__(self, other: Any) -> "Residue":
        value = self._other(other)
        if value is NotImplemented:
            return NotImplemented
        return Residue(self.value * value, self.modulus)

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> "Residue":
        value = self._other(other)
        if value is NotImplemented:
            return NotImplemented
        if value % self.modulus == 0:
            raise ZeroDivisionError("division by zero residue")
        return Residue(self.value * pow(value, -1, self.modulus), self.modulus)

    def __rtruediv__(self, other: Any) -> "Residue":
        value = self._other(other)
        if value is NotImplemented:
            return NotImplemented
        return Residue(value, self.modulus) / self

    def __mod__(self, other: Any) -> "Residue":
        value = self._other(other)
        if value is NotImplemented:
            return NotImplemented
        return Residue(self.value % value, self.modulus)

    def __neg__(self) -> "Residue":
        return Residue(-self.value, self.modulus)

    def __pos__(self) -> "Residue":
        return self

    def __abs__(self) -> "Residue":
        return self

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Residue):
            return self.modulus == other.modulus and self.value == other.value
        if isinstance(other, int):
            return self.value == other % self.modulus
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.value, self.modulus))

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"{self.value} (mod {self.modulus})"


@dataclass(frozen=True, repr=False)
class ModularField(Field):
    """Integers modulo a prime ``modulus``.

    Magnitudes are the canonical representatives in ``[0, modulus)``, which is
    enough for partial pivoting to pick a non-zero pivot.
    """

    modulus: int
    name = "modular"
    nbytes = 8

    def __post_init__(self) -> None:
        if self.modulus < 2:
            raise ValueError("modulus must be at least 2")

    @property
    def ZERO(self) -> Residue:  # type: ignore[override]
        return Residue(0, self.modulus)

    @property
    def ONE(self) -> Residue:  # type: ignore[override]
        return Residue(1, self.modulus)

    def coerce(self, value: Any) -> Residue:
        if isinstance(value, Residue):
            if value.modulus != self.modulus:
                raise ValueError("residue belongs to a different modulus")
            return value
        if isinstance(value, Fraction):
            return Residue(value.numerator, self.modulus) / Residue(value.denominator, self.modulus)
        return Residue(int(value), self.modulus)

    def abs(self, value: Residue) -> int:
        return value.value

    def sqrt(self, value: Residue) -> Residue:
        p = self.modulus
        if value.value == 0:
            return value
        if p % 4 == 3:
            root = pow(value.value, (p + 1) // 4, p)
            if root * root % p == value.value:
                return Residue(root, p)
            raise ArithmeticError(f"{value.value} is not a quadratic residue modulo {p}")
        # Small moduli only; no Tonelli-Shanks.
        for root in range(1, p):
            if root * root % p == value.value:
                return Residue(root, p)
        raise ArithmeticError(f"{value.value} is not a quadratic residue modulo {p}")

    def sort_key(self, value: Residue) -> int:
        return value.value

    def is_positive(self, value: Residue) -> bool:
        return value.value != 0

    def is_negative(self, value: Residue) -> bool:
        return False

    def random(self, rng: np.random.Generator) -> Residue:
        return Residue(int(rng.integers(1, self.modulus)), self.modulus)

    def pack(self, value: Residue) -> bytes:
        return struct.pack(BYTE_ORDER + "q", value.value)

    def unpack(self, data: bytes) -> Residue:
        return Residue(struct.unpack(BYTE_ORDER + "q", data)[0], self.modulus)

    def __repr__(self) -> str:
        return f"ModularField({self.modulus})"


REAL = RealField()
COMPLEX = ComplexField()
RATIONAL = RationalField()

FIELDS = {"real": REAL, "complex": COMPLEX, "rational": RATIONAL}


def field_for_dtype(dtype: Any) -> Field:
    """Pick the reference field matching a numpy dtype."""

    kind = np.dtype(dtype).kind
    if kind == "c":
        return COMPLEX
    if kind in "fiub":
        return REAL
    raise TypeError(f"no field for dtype {dtype!r}")
