"""Numba-compiled range workers.

Compiled with ``nogil=True`` so worker threads run concurrently. No
``fastmath``: products must accumulate in increasing ``k``.
"""

__all__ = [
    "add_range_numba",
    "subtract_range_numba",
    "matmul_rows_numba",
    "transpose_rows_numba",
]

from numba import njit

from parmat.utils.typing import NDArray


@njit(nogil=True, cache=True)
def add_range_numba(lhs: NDArray, rhs: NDArray, out: NDArray) -> None:
    for i in range(out.shape[0]):
        out[i] = lhs[i] + rhs[i]


@njit(nogil=True, cache=True)
def subtract_range_numba(lhs: NDArray, rhs: NDArray, out: NDArray) -> None:
    for i in range(out.shape[0]):
        out[i] = lhs[i] - rhs[i]


@njit(nogil=True, cache=True)
def matmul_rows_numba(lhs: NDArray, rhs: NDArray, out: NDArray) -> None:
    """Row block of the product, i (outer), j, k (inner) loop order."""
    nrows, n = lhs.shape
    m = rhs.shape[1]
    for i in range(nrows):
        for j in range(m):
            acc = 0.0
            for k in range(n):
                acc += lhs[i, k] * rhs[k, j]
            out[i, j] = acc


@njit(nogil=True, cache=True)
def transpose_rows_numba(inp: NDArray, out: NDArray) -> None:
    nrows, ncols = inp.shape
    for i in range(nrows):
        for j in range(ncols):
            out[j, i] = inp[i, j]
