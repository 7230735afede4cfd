__all__ = [
    "partition",
    "worker_count",
    "split",
    "parallel_map",
]

import concurrent.futures as mt
import logging
from functools import lru_cache
from typing import Callable, List, Sequence

from threadpoolctl import ThreadpoolController

from parmat.utils.typing import NDArray, RangeLike

logger = logging.getLogger(__name__)


def partition(total: int, nworkers: int) -> List[RangeLike]:
    r"""Split ``[0, total)`` into contiguous, non-overlapping ranges.

    Each of the ``nworkers`` ranges holds ``total // nworkers`` units, and
    the last one also absorbs the remainder of the integer division.
    Ranges that would start at or after ``total`` (or be empty) are
    dropped, so fewer than ``nworkers`` ranges may be returned.

    Parameters
    ----------
    total : :obj:`int`
        Number of partition units (flat elements or rows)
    nworkers : :obj:`int`
        Nominal number of workers

    Returns
    -------
    ranges : :obj:`list`
        ``(start, stop)`` pairs whose union is exactly ``[0, total)``

    Raises
    ------
    ValueError
        If ``total`` is negative or ``nworkers`` is smaller than 1

    Notes
    -----
    With :math:`c = \lfloor T / W \rfloor`, worker :math:`w` is assigned

    .. math::
        [w c, (w + 1) c) \quad w = 0, \ldots, W - 2, \qquad [(W - 1) c, T)

    """
    if total < 0:
        raise ValueError(f"total must be non-negative, got {total}")
    if nworkers < 1:
        raise ValueError(f"nworkers must be at least 1, got {nworkers}")
    chunk = total // nworkers
    ranges = []
    for iworker in range(nworkers):
        start = iworker * chunk
        stop = total if iworker == nworkers - 1 else start + chunk
        if start >= total or start >= stop:
            continue
        ranges.append((start, stop))
    _check_coverage(ranges, total)
    return ranges


def _check_coverage(ranges: Sequence[RangeLike], total: int) -> None:
    """Ranges must tile ``[0, total)`` in order, without gaps or overlaps."""
    expected = 0
    for start, stop in ranges:
        if start != expected or stop <= start:
            raise RuntimeError(f"ranges {ranges} do not tile [0, {total})")
        expected = stop
    if total > 0 and expected != total:
        raise RuntimeError(f"ranges {ranges} do not tile [0, {total})")


def worker_count(units: int, nproc: int) -> int:
    """Number of workers for ``units`` partition units, at most ``nproc``."""
    return max(1, min(nproc, units))


def split(buffer: NDArray, ranges: Sequence[RangeLike], axis: int = 0) -> List[NDArray]:
    """Split an output buffer into one writable view per range.

    Parameters
    ----------
    buffer : :obj:`numpy.ndarray`
        Output buffer exclusively owned by the caller
    ranges : :obj:`list`
        Ranges produced by :func:`partition`
    axis : :obj:`int`, optional
        Axis the ranges index: ``0`` for flat elements or rows, ``1`` for
        columns of a 2-dimensional buffer

    Returns
    -------
    views : :obj:`list`
        Views of ``buffer``, pairwise disjoint since ``ranges`` are

    """
    _check_coverage(ranges, buffer.shape[axis])
    if axis == 0:
        return [buffer[start:stop] for start, stop in ranges]
    return [buffer[:, start:stop] for start, stop in ranges]


def parallel_map(
    func: Callable[[int, int], None],
    ranges: Sequence[RangeLike],
    limit_blas_threads: bool = False,
) -> None:
    """Run ``func(start, stop)`` for every range and wait for all of them.

    One thread is spawned per range on a scoped
    :class:`concurrent.futures.ThreadPoolExecutor`, which is shut down
    before returning. A single range runs in the calling thread. The first
    exception raised by a worker is re-raised in the caller once every
    worker has finished.

    Parameters
    ----------
    func : :obj:`callable`
        Range worker. It must only write the output slots of its own range.
    ranges : :obj:`list`
        Ranges produced by :func:`partition`
    limit_blas_threads : :obj:`bool`, optional
        Pin native BLAS/OpenMP pools to one thread while workers run. Only
        useful for workers that call BLAS, which the shipped kernels do not.
        The limit is process-wide and restored on exit, so it is not safe
        when several threads call :func:`parallel_map` at the same time.

    """
    if len(ranges) == 0:
        return
    if len(ranges) == 1:
        func(*ranges[0])
        return
    logger.debug("forking %d workers over %s", len(ranges), ranges)
    if limit_blas_threads:
        with _blas_controller().limit(limits=1):
            _fork_join(func, ranges)
    else:
        _fork_join(func, ranges)


@lru_cache(maxsize=None)
def _blas_controller() -> ThreadpoolController:
    """Controller of the native thread pools, inspected once per process."""
    return ThreadpoolController()


def _fork_join(func: Callable[[int, int], None], ranges: Sequence[RangeLike]) -> None:
    with mt.ThreadPoolExecutor(max_workers=len(ranges)) as executor:
        futures = [executor.submit(func, start, stop) for start, stop in ranges]
        mt.wait(futures)
    for future in futures:
        future.result()
