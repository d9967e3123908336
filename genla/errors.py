"""Exception hierarchy raised by the linear algebra engine."""

from __future__ import annotations


class LinearAlgebraError(ValueError):
    """Base class for every error raised by :mod:`genla`."""


class DimensionMismatchError(LinearAlgebraError):
    """Operand sizes or shapes disagree."""


class SingularMatrixError(LinearAlgebraError):
    """The matrix is not invertible (zero determinant or not square)."""


class InvalidOperationError(LinearAlgebraError):
    """The operation is undefined for the given operand."""


class MalformedDataError(LinearAlgebraError):
    """A serialized buffer does not describe a valid object."""
