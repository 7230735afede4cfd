__all__ = [
    "use_parallel",
    "elementwise",
    "matmul",
    "transpose",
]

import logging
from typing import Optional

import numpy as np

from parmat.config import ParallelConfig, check_count, get_config
from parmat.errors import DimensionMismatch
from parmat.parallel.kernels import get_kernels
from parmat.parallel.partition import parallel_map, partition, split, worker_count
from parmat.utils.typing import NDArray, ShapeLike

logger = logging.getLogger(__name__)


def use_parallel(
    op: str,
    shape: ShapeLike,
    other: Optional[ShapeLike] = None,
    min_parallel_size: Optional[int] = None,
) -> bool:
    """Threshold policy deciding between sequential and parallel paths.

    Parameters
    ----------
    op : :obj:`str`
        Operation (``add``, ``subtract``, ``matmul`` or ``transpose``)
    shape : :obj:`tuple`
        Shape of the (left) operand
    other : :obj:`tuple`, optional
        Shape of the right operand (``matmul`` only)
    min_parallel_size : :obj:`int`, optional
        Threshold. Defaults to the one of the current setting.

    Returns
    -------
    parallel : :obj:`bool`
        ``True`` if the operation should run in parallel

    """
    if min_parallel_size is None:
        min_parallel_size = get_config().min_parallel_size
    if op in ("add", "subtract"):
        return shape[0] * shape[1] >= min_parallel_size
    if op == "matmul":
        # thresholds on the output shape, not on the contracted dimension
        return shape[0] >= min_parallel_size or other[1] >= min_parallel_size
    if op == "transpose":
        return shape[0] >= min_parallel_size or shape[1] >= min_parallel_size
    raise ValueError(f"unknown operation {op!r}")


def _resolve(
    op: str,
    shape: ShapeLike,
    other: Optional[ShapeLike],
    units: int,
    parallel: Optional[bool],
    nproc: Optional[int],
    config: ParallelConfig,
):
    if parallel is None:
        parallel = use_parallel(op, shape, other, config.min_parallel_size)
    if nproc is None:
        nproc = config.nproc
    else:
        check_count("nproc", nproc)
    nworkers = worker_count(units, nproc) if parallel else 1
    logger.debug(
        "%s on %s: %s path, %d worker(s) over %d units",
        op,
        shape if other is None else f"{shape} x {other}",
        "parallel" if parallel else "sequential",
        nworkers,
        units,
    )
    return parallel, nworkers


def elementwise(
    op: str,
    lhs: NDArray,
    rhs: NDArray,
    parallel: Optional[bool] = None,
    nproc: Optional[int] = None,
) -> NDArray:
    """Element-wise addition or subtraction of two 2-dimensional arrays.

    Parameters
    ----------
    op : :obj:`str`
        ``add`` or ``subtract``
    lhs : :obj:`numpy.ndarray`
        Left operand (C-contiguous float64)
    rhs : :obj:`numpy.ndarray`
        Right operand (C-contiguous float64)
    parallel : :obj:`bool`, optional
        Force the parallel (``True``) or sequential (``False``) path. If
        ``None``, the threshold policy decides.
    nproc : :obj:`int`, optional
        Worker-count ceiling. Defaults to the one of the current setting.

    Returns
    -------
    out : :obj:`numpy.ndarray`
        Newly allocated result

    Raises
    ------
    DimensionMismatch
        If ``lhs`` and ``rhs`` have different shapes

    """
    if op not in ("add", "subtract"):
        raise ValueError(f"op must be add or subtract, got {op!r}")
    if lhs.shape != rhs.shape:
        raise DimensionMismatch(
            f"Matrix dimensions must match for {op}: "
            f"{lhs.shape[0]}x{lhs.shape[1]} and {rhs.shape[0]}x{rhs.shape[1]}"
        )
    config = get_config()
    kernel = get_kernels(config.engine)[op]
    lhs_flat, rhs_flat = lhs.reshape(-1), rhs.reshape(-1)
    out = np.empty(lhs.shape, dtype=np.float64)
    out_flat = out.reshape(-1)
    total = out_flat.size

    parallel, nworkers = _resolve(op, lhs.shape, None, total, parallel, nproc, config)
    if not parallel:
        kernel(lhs_flat, rhs_flat, out_flat)
        return out

    ranges = partition(total, nworkers)
    views = dict(zip(ranges, split(out_flat, ranges)))

    def worker(start: int, stop: int) -> None:
        kernel(lhs_flat[start:stop], rhs_flat[start:stop], views[(start, stop)])

    parallel_map(worker, ranges, config.limit_blas_threads)
    return out


def matmul(
    lhs: NDArray,
    rhs: NDArray,
    parallel: Optional[bool] = None,
    nproc: Optional[int] = None,
) -> NDArray:
    """Matrix product of two 2-dimensional arrays, partitioned by output row.

    Parameters
    ----------
    lhs : :obj:`numpy.ndarray`
        Left operand of shape ``(n, k)``
    rhs : :obj:`numpy.ndarray`
        Right operand of shape ``(k, m)``
    parallel : :obj:`bool`, optional
        Force the parallel (``True``) or sequential (``False``) path. If
        ``None``, the threshold policy decides.
    nproc : :obj:`int`, optional
        Worker-count ceiling. Defaults to the one of the current setting.

    Returns
    -------
    out : :obj:`numpy.ndarray`
        Newly allocated result of shape ``(n, m)``

    Raises
    ------
    DimensionMismatch
        If ``lhs.shape[1] != rhs.shape[0]``

    """
    if lhs.shape[1] != rhs.shape[0]:
        raise DimensionMismatch(
            f"Matrix dimensions must be compatible for multiplication: "
            f"{lhs.shape[0]}x{lhs.shape[1]} and {rhs.shape[0]}x{rhs.shape[1]}"
        )
    config = get_config()
    kernel = get_kernels(config.engine)["matmul"]
    out = np.empty((lhs.shape[0], rhs.shape[1]), dtype=np.float64)
    units = lhs.shape[0]

    parallel, nworkers = _resolve(
        "matmul", lhs.shape, rhs.shape, units, parallel, nproc, config
    )
    if not parallel:
        kernel(lhs, rhs, out)
        return out

    ranges = partition(units, nworkers)
    views = dict(zip(ranges, split(out, ranges)))

    def worker(start: int, stop: int) -> None:
        kernel(lhs[start:stop], rhs, views[(start, stop)])

    parallel_map(worker, ranges, config.limit_blas_threads)
    return out


def transpose(
    inp: NDArray,
    parallel: Optional[bool] = None,
    nproc: Optional[int] = None,
) -> NDArray:
    """Transpose of a 2-dimensional array, partitioned by input row.

    Worker owning input rows ``[start, stop)`` writes output columns
    ``[start, stop)``, which touches every output row.

    Parameters
    ----------
    inp : :obj:`numpy.ndarray`
        Input of shape ``(n, m)``
    parallel : :obj:`bool`, optional
        Force the parallel (``True``) or sequential (``False``) path. If
        ``None``, the threshold policy decides.
    nproc : :obj:`int`, optional
        Worker-count ceiling. Defaults to the one of the current setting.

    Returns
    -------
    out : :obj:`numpy.ndarray`
        Newly allocated, C-contiguous result of shape ``(m, n)``

    """
    config = get_config()
    kernel = get_kernels(config.engine)["transpose"]
    out = np.empty((inp.shape[1], inp.shape[0]), dtype=np.float64)
    units = inp.shape[0]

    parallel, nworkers = _resolve(
        "transpose", inp.shape, None, units, parallel, nproc, config
    )
    if not parallel:
        kernel(inp, out)
        return out

    ranges = partition(units, nworkers)
    views = dict(zip(ranges, split(out, ranges, axis=1)))

    def worker(start: int, stop: int) -> None:
        kernel(inp[start:stop], views[(start, stop)])

    parallel_map(worker, ranges, config.limit_blas_threads)
    return out
