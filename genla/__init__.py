"""genla: generic dense linear algebra over abstract scalar fields.

Vectors and matrices work identically over floats, complex numbers, exact
rationals and prime residues; the field is an explicit :class:`Field`
object rather than something discovered at runtime.
"""

from .compressed import CompressedStorageFormat
from .eigen import InverseIteration
from .errors import (
    DimensionMismatchError,
    InvalidOperationError,
    LinearAlgebraError,
    MalformedDataError,
    SingularMatrixError,
)
from .field import COMPLEX, RATIONAL, REAL, ComplexField, Field, ModularField, RationalField, RealField, Residue
from .matrix import Matrix, MutableMatrix
from .space import VectorSpace
from .vector import MutableVector, Vector

__all__ = [
    "CompressedStorageFormat",
    "InverseIteration",
    "LinearAlgebraError",
    "DimensionMismatchError",
    "SingularMatrixError",
    "InvalidOperationError",
    "MalformedDataError",
    "Field",
    "RealField",
    "ComplexField",
    "RationalField",
    "ModularField",
    "Residue",
    "REAL",
    "COMPLEX",
    "RATIONAL",
    "Vector",
    "MutableVector",
    "Matrix",
    "MutableMatrix",
    "VectorSpace",
]
