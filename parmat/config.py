r"""
Parallel execution settings
===========================

The process-wide, immutable :class:`ParallelConfig` decides when matrix
operations switch to their parallel path and how many worker threads
they may use. The setting is built once at import time (optionally from
environment variables) and replaced as a whole by :func:`set_config`;
operations read it once when they start and never re-sample it.

Environment variables (read once, at import):

    PARMAT_NPROC                    worker-count ceiling
    PARMAT_MIN_PARALLEL_SIZE        threshold of the parallel path
    PARMAT_ENGINE                   kernel engine (``numpy`` or ``numba``)
    PARMAT_LIMIT_BLAS_THREADS       pin native thread pools inside workers

"""

__all__ = [
    "MIN_PARALLEL_SIZE",
    "ENGINES",
    "ParallelConfig",
    "available_parallelism",
    "get_config",
    "set_config",
    "config_context",
]

import logging
import numbers
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Final, Iterator, Tuple

logger = logging.getLogger(__name__)

MIN_PARALLEL_SIZE: Final[int] = 64
ENGINES: Final[Tuple[str, ...]] = ("numpy", "numba")


def check_count(name: str, value) -> None:
    """Raise :obj:`ValueError` unless ``value`` is an integer of at least 1."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")


@lru_cache(maxsize=None)
def available_parallelism() -> int:
    """Number of CPUs usable by this process.

    Sampled on first call and cached for the lifetime of the process.
    Never smaller than 1.

    """
    if hasattr(os, "sched_getaffinity"):
        ncpu = len(os.sched_getaffinity(0))
    else:
        ncpu = os.cpu_count()
    return max(1, ncpu or 1)


@dataclass(frozen=True)
class ParallelConfig:
    r"""Parallel execution settings.

    Parameters
    ----------
    nproc : :obj:`int`, optional
        Maximum number of worker threads spawned by a single operation.
        Defaults to :func:`available_parallelism`.
    min_parallel_size : :obj:`int`, optional
        Threshold of the parallel path. Addition and subtraction go
        parallel when ``rows * cols >= min_parallel_size``, multiplication
        when ``lhs.rows`` or ``rhs.cols`` reaches it, and transpose when
        ``rows`` or ``cols`` reaches it.
    engine : :obj:`str`, optional
        Kernel engine used by the range workers (``numpy`` or ``numba``).
    limit_blas_threads : :obj:`bool`, optional
        Pin native BLAS/OpenMP thread pools to one thread while parallel
        workers run. Off by default: the shipped kernels never call BLAS,
        and the limit is process-wide, so concurrent operations using it
        may restore each other's pool sizes out of order.

    Raises
    ------
    ValueError
        If ``nproc`` or ``min_parallel_size`` are not integers or are
        smaller than 1, or ``engine`` is unknown

    """

    nproc: int = field(default_factory=available_parallelism)
    min_parallel_size: int = MIN_PARALLEL_SIZE
    engine: str = "numpy"
    limit_blas_threads: bool = False

    def __post_init__(self) -> None:
        check_count("nproc", self.nproc)
        check_count("min_parallel_size", self.min_parallel_size)
        if self.engine not in ENGINES:
            raise ValueError(f"engine must be one of {ENGINES}, got {self.engine!r}")


def _config_from_env() -> ParallelConfig:
    kwargs = {}
    if "PARMAT_NPROC" in os.environ:
        kwargs["nproc"] = int(os.environ["PARMAT_NPROC"])
    if "PARMAT_MIN_PARALLEL_SIZE" in os.environ:
        kwargs["min_parallel_size"] = int(os.environ["PARMAT_MIN_PARALLEL_SIZE"])
    if "PARMAT_ENGINE" in os.environ:
        kwargs["engine"] = os.environ["PARMAT_ENGINE"]
    if "PARMAT_LIMIT_BLAS_THREADS" in os.environ:
        kwargs["limit_blas_threads"] = bool(
            int(os.environ["PARMAT_LIMIT_BLAS_THREADS"])
        )
    return ParallelConfig(**kwargs)


_config: ParallelConfig = _config_from_env()
_config_lock = threading.Lock()


def get_config() -> ParallelConfig:
    """Return the current process-wide setting."""
    return _config


def set_config(**changes) -> ParallelConfig:
    """Replace the process-wide setting.

    Parameters
    ----------
    **changes
        Fields of :class:`ParallelConfig` to change. Fields not given keep
        their current value.

    Returns
    -------
    config : :obj:`parmat.config.ParallelConfig`
        The new setting

    Raises
    ------
    ValueError
        If the resulting setting is invalid (the current one is kept)

    """
    global _config
    with _config_lock:
        new = replace(_config, **changes)
        _config = new
    logger.debug("parallel config set to %s", new)
    return new


@contextmanager
def config_context(**changes) -> Iterator[ParallelConfig]:
    """Temporarily replace the process-wide setting.

    The previous setting is restored on exit, also when the block raises,
    but only if the setting installed here is still the current one: a
    :func:`set_config` issued meanwhile (by the block or by another thread)
    is kept. The setting is process-wide, so nesting contexts from
    several threads does not give each thread its own value.

    """
    global _config
    with _config_lock:
        previous = _config
        installed = replace(previous, **changes)
        _config = installed
    logger.debug("parallel config set to %s", installed)
    try:
        yield installed
    finally:
        with _config_lock:
            if _config is installed:
                _config = previous
