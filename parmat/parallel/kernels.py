__all__ = [
    "add_range",
    "subtract_range",
    "matmul_rows",
    "transpose_rows",
    "get_kernels",
]

import warnings
from typing import Callable, Dict

import numpy as np

from parmat.utils import deps
from parmat.utils.typing import EngineLike, NDArray

jit_message = deps.numba_import("the numba matrix kernels")

if jit_message is None:
    from parmat.parallel import _kernels_numba


def add_range(lhs: NDArray, rhs: NDArray, out: NDArray) -> None:
    """Element-wise sum of two flat ranges into ``out``."""
    np.add(lhs, rhs, out=out)


def subtract_range(lhs: NDArray, rhs: NDArray, out: NDArray) -> None:
    """Element-wise difference of two flat ranges into ``out``."""
    np.subtract(lhs, rhs, out=out)


def matmul_rows(lhs: NDArray, rhs: NDArray, out: NDArray) -> None:
    r"""Product of a block of rows of ``lhs`` with the whole of ``rhs``.

    Parameters
    ----------
    lhs : :obj:`numpy.ndarray`
        Rows :math:`[i_0, i_1)` of the left operand, shape ``(nrows, n)``
    rhs : :obj:`numpy.ndarray`
        Right operand, shape ``(n, m)``
    out : :obj:`numpy.ndarray`
        Rows :math:`[i_0, i_1)` of the output, shape ``(nrows, m)``

    Notes
    -----
    Every output cell is accumulated from ``0.0`` in increasing :math:`k`

    .. math::
        c_{ij} = (\ldots((0 + a_{i0} b_{0j}) + a_{i1} b_{1j}) + \ldots)
        + a_{i,n-1} b_{n-1,j}

    which is the summation order of the scalar :math:`i, j, k` loop, done
    here one rank-one update per :math:`k` over the whole block.

    """
    out[...] = 0.0
    if out.size == 0:
        return
    tmp = np.empty_like(out)
    for k in range(lhs.shape[1]):
        np.multiply(lhs[:, k, np.newaxis], rhs[k], out=tmp)
        out += tmp


def transpose_rows(inp: NDArray, out: NDArray) -> None:
    """Scatter a block of input rows into the matching output columns.

    ``inp`` holds rows :math:`[i_0, i_1)` of the input, shape
    ``(nrows, cols)``, and ``out`` the columns :math:`[i_0, i_1)` of the
    output, shape ``(cols, nrows)``.

    """
    out[...] = inp.T


_numpy_kernels: Dict[str, Callable] = {
    "add": add_range,
    "subtract": subtract_range,
    "matmul": matmul_rows,
    "transpose": transpose_rows,
}


def get_kernels(engine: EngineLike = "numpy") -> Dict[str, Callable]:
    """Range workers of the requested engine.

    Parameters
    ----------
    engine : :obj:`str`, optional
        Engine of the kernels (``numpy`` or ``numba``). If ``numba`` is
        requested but not available, a warning is raised and the numpy
        kernels are returned.

    Returns
    -------
    kernels : :obj:`dict`
        Kernels keyed by operation (``add``, ``subtract``, ``matmul``,
        ``transpose``)

    Raises
    ------
    ValueError
        If ``engine`` is neither ``numpy`` nor ``numba``

    """
    if engine not in ("numpy", "numba"):
        raise ValueError(f"engine must be numpy or numba, got {engine!r}")
    if engine == "numba":
        if jit_message is None:
            return {
                "add": _kernels_numba.add_range_numba,
                "subtract": _kernels_numba.subtract_range_numba,
                "matmul": _kernels_numba.matmul_rows_numba,
                "transpose": _kernels_numba.transpose_rows_numba,
            }
        warnings.warn(jit_message)
    return _numpy_kernels
