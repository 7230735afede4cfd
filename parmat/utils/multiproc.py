__all__ = ["scalability_test"]

import logging
import time
from typing import List, Optional, Tuple

from parmat.matrix import Matrix

logger = logging.getLogger(__name__)

_OPERATIONS = ("add", "subtract", "multiply", "transpose")


def scalability_test(
    operation: str,
    lhs: Matrix,
    rhs: Optional[Matrix] = None,
    workers: Optional[List[int]] = None,
    ntimes: int = 1,
) -> Tuple[List[float], List[float]]:
    r"""Scalability test.

    Small auxiliary routine to test the performance of the parallel path
    of a matrix operation. This helps identifying the number of workers
    beyond which no performance gain is observed.

    Parameters
    ----------
    operation : :obj:`str`
        Operation to test (``add``, ``subtract``, ``multiply`` or
        ``transpose``)
    lhs : :obj:`parmat.Matrix`
        Left (or only) operand
    rhs : :obj:`parmat.Matrix`, optional
        Right operand. Required by every operation but ``transpose``.
    workers : :obj:`list`, optional
        Number of workers to test out. Defaults to `[1, 2, 4]`.
    ntimes : :obj:`int`, optional
        Number of times the operation is applied whilst timing. Consider
        using :math:`n_{times} \ge 10` to obtain a stable measure of the
        compute times and speedups.

    Returns
    -------
    compute_times : :obj:`list`
        Compute times as function of workers
    speedup : :obj:`list`
        Speedup as function of workers

    Raises
    ------
    ValueError
        If ``operation`` is unknown or ``rhs`` is missing

    """
    if operation not in _OPERATIONS:
        raise ValueError(f"operation must be one of {_OPERATIONS}, got {operation!r}")
    if operation != "transpose" and rhs is None:
        raise ValueError(f"{operation} requires rhs")
    if workers is None:
        workers = [1, 2, 4]
    compute_times = []
    speedup = []
    for nworkers in workers:
        logger.info("Working with %d workers...", nworkers)
        starttime = time.perf_counter()
        for _ in range(ntimes):
            if operation == "transpose":
                _ = lhs.transpose(parallel=True, nproc=nworkers)
            else:
                _ = getattr(lhs, operation)(rhs, parallel=True, nproc=nworkers)
        elapsedtime = (time.perf_counter() - starttime) / ntimes
        compute_times.append(elapsedtime)
        speedup.append(compute_times[0] / elapsedtime)
    return compute_times, speedup
