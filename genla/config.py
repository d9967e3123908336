"""Default numerical settings.

The values are used as keyword defaults throughout the package; every
algorithm accepts an explicit override so nothing here is global state.
"""

from __future__ import annotations

# Absolute tolerance for approximate comparisons of scalar magnitudes.
ATOL = 1e-9

# Inverse iteration: successive iterates closer than this count as converged.
EIGEN_TOLERANCE = 1e-10
EIGEN_MAX_ITERATIONS = 10_000

# Eigenvalues (and eigenvectors) closer than this are reported once.
EIGEN_EQUALITY_TOLERANCE = 1e-6

# Relative offset applied to a shift that coincides with a known eigenvalue.
SHIFT_NUDGE = 1e-3

# Relative shift change after an inverse iteration fails to converge.
SHIFT_RETRY = 0.1

# Largest residual accepted when a least-squares solution is checked.
RESIDUAL_TOLERANCE = 1e-6

SEED = 2025

# Byte order of the compressed storage format ("<" little endian).
BYTE_ORDER = "<"

# Largest columns x rows accepted when decoding untrusted compressed bytes.
MAX_DENSE_ENTRIES = 1 << 26
