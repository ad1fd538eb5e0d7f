import numpy as np
from Core.exceptions import DimensionMismatchError, EmptyInputError, RaggedMatrixError

# --------------------
# Validation helpers
# --------------------

def as_matrix(x, name="matrix"):
    """
    Converts x into a 2-D float64 array after checking its shape.

    Args:
        x: numpy array or sequence of equal-length rows.
        name: Used in error messages.
    Returns:
        np.ndarray of shape (rows, cols).
    Raises:
        EmptyInputError: x has zero rows.
        RaggedMatrixError: rows have inconsistent lengths.
    """
    if isinstance(x, np.ndarray):
        if x.ndim != 2:
            raise DimensionMismatchError(f"{name} must be 2-D, got shape {x.shape}")
        if x.shape[0] == 0:
            raise EmptyInputError(f"{name} cannot be empty")
        return x.astype(np.float64, copy=False)

    rows = list(x)
    if len(rows) == 0:
        raise EmptyInputError(f"{name} cannot be empty")

    # Check row lengths before numpy gets a chance to build an object array
    if not all(hasattr(row, "__len__") for row in rows):
        raise RaggedMatrixError(f"{name} must be a sequence of rows")
    cols = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != cols:
            raise RaggedMatrixError(
                f"{name} has inconsistent column lengths (row 0 has {cols}, row {i} has {len(row)})"
            )
    return np.array(rows, dtype=np.float64)


def as_vector(v, name="vector"):
    """Converts v into a 1-D float64 array."""
    arr = np.asarray(v, dtype=np.float64)
    if arr.ndim != 1:
        raise DimensionMismatchError(f"{name} must be 1-D, got shape {arr.shape}")
    return arr


def copy_matrix(m):
    """Deep copy, no row of the result aliases a row of m."""
    return np.array(m, dtype=np.float64, copy=True)


def check_same_shape(a, b, what="operands"):
    if a.shape != b.shape:
        raise DimensionMismatchError(f"{what} have different shapes: {a.shape} vs {b.shape}")

# --------------------
# Scalar Operations
# --------------------

def round_to(x, digits):
    """
    Rounds x to `digits` decimals, halves away from zero.
    Negative digits round to the nearest integer.
    """
    pow10 = 10.0 ** max(digits, 0)
    return float(np.sign(x) * np.floor(abs(x) * pow10 + 0.5) / pow10)

# --------------------
# Vector Operations
# --------------------

def dot(v1, v2):
    v1, v2 = as_vector(v1), as_vector(v2)
    if v1.shape != v2.shape:
        raise DimensionMismatchError(f"dot: vector length mismatch ({v1.size} vs {v2.size})")
    return float(np.dot(v1, v2))


def add(v1, v2):
    v1, v2 = as_vector(v1), as_vector(v2)
    if v1.shape != v2.shape:
        raise DimensionMismatchError(f"add: vector length mismatch ({v1.size} vs {v2.size})")
    return v1 + v2


def sub(v1, v2):
    v1, v2 = as_vector(v1), as_vector(v2)
    if v1.shape != v2.shape:
        raise DimensionMismatchError(f"sub: vector length mismatch ({v1.size} vs {v2.size})")
    return v1 - v2


def scale(v, k):
    return as_vector(v) * k


def norm(v):
    """Euclidean (L2) norm. 0.0 for an empty vector."""
    v = as_vector(v)
    if v.size == 0:
        return 0.0
    return float(np.sqrt(np.sum(v * v)))


def normalize(v):
    """
    Returns the unit vector pointing along v.
    A zero vector is returned unchanged (as zeros) instead of dividing by 0.
    """
    v = as_vector(v)
    n = norm(v)
    if n == 0:
        return np.zeros_like(v)
    return v / n


def elementwise_max(a, b):
    """Elementwise maximum of two equally shaped arrays (like np.maximum, but strict on shape)."""
    a, b = np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)
    check_same_shape(a, b, "elementwise_max operands")
    return np.maximum(a, b)

# --------------------
# Matrix Operations
# --------------------

def matmul(A, B):
    """
    Matrix product A (m x n) @ B (n x p) = C (m x p).

    Raises:
        EmptyInputError: either operand has zero rows.
        DimensionMismatchError: A's column count != B's row count.
    """
    A = as_matrix(A, "matmul: A")
    B = as_matrix(B, "matmul: B")
    if A.shape[1] != B.shape[0]:
        raise DimensionMismatchError(
            f"matmul: incompatible dimensions {A.shape} @ {B.shape}"
        )
    return A @ B


def transpose(M):
    # Empty in, empty out
    if len(M) == 0:
        return np.zeros((0, 0))
    return as_matrix(M, "transpose").T.copy()
