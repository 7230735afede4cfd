import threading

import numpy as np
import pytest

from parmat import config
from parmat.config import (
    MIN_PARALLEL_SIZE,
    ParallelConfig,
    available_parallelism,
    config_context,
    get_config,
    set_config,
)


def test_available_parallelism():
    """Sampled once, never below one"""
    nproc = available_parallelism()
    assert nproc >= 1
    assert available_parallelism() == nproc
    assert available_parallelism.cache_info().currsize == 1


def test_defaults():
    default = ParallelConfig()
    assert default.nproc == available_parallelism()
    assert default.min_parallel_size == MIN_PARALLEL_SIZE == 64
    assert default.engine == "numpy"
    assert not default.limit_blas_threads


@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"nproc": 0}, "nproc"),
        ({"nproc": 2.5}, "nproc must be an integer"),
        ({"nproc": "8"}, "nproc must be an integer"),
        ({"nproc": True}, "nproc must be an integer"),
        ({"min_parallel_size": 64.0}, "min_parallel_size must be an integer"),
        ({"min_parallel_size": 0}, "min_parallel_size"),
        ({"engine": "cuda"}, "engine"),
    ],
)
def test_invalid_config(kwargs, match):
    with pytest.raises(ValueError, match=match):
        ParallelConfig(**kwargs)


def test_config_is_immutable():
    with pytest.raises(AttributeError):
        get_config().nproc = 3


def test_set_config():
    previous = get_config()
    try:
        new = set_config(nproc=3, min_parallel_size=10)
        assert get_config() is new
        assert new.nproc == 3
        assert new.min_parallel_size == 10
        assert new.engine == previous.engine
        with pytest.raises(ValueError):
            set_config(nproc=-1)
        assert get_config() is new
    finally:
        set_config(
            nproc=previous.nproc,
            min_parallel_size=previous.min_parallel_size,
            engine=previous.engine,
            limit_blas_threads=previous.limit_blas_threads,
        )


def test_config_context_restores():
    previous = get_config()
    with config_context(nproc=2) as current:
        assert get_config() is current
        assert current.nproc == 2
    assert get_config() is previous

    with pytest.raises(KeyError):
        with config_context(min_parallel_size=5):
            raise KeyError("boom")
    assert get_config() is previous


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("PARMAT_NPROC", "5")
    monkeypatch.setenv("PARMAT_MIN_PARALLEL_SIZE", "128")
    monkeypatch.setenv("PARMAT_ENGINE", "numba")
    monkeypatch.setenv("PARMAT_LIMIT_BLAS_THREADS", "0")
    env = config._config_from_env()
    assert env == ParallelConfig(
        nproc=5, min_parallel_size=128, engine="numba", limit_blas_threads=False
    )


def test_numpy_integer_config():
    current = ParallelConfig(nproc=np.int64(3), min_parallel_size=np.int32(8))
    assert current.nproc == 3
    assert current.min_parallel_size == 8


def test_config_context_keeps_later_set_config():
    """A setting replaced inside the block survives the restore"""
    previous = get_config()
    try:
        with config_context(nproc=2):
            changed = set_config(min_parallel_size=7)
        assert get_config() is changed
        assert changed.nproc == 2
        assert changed.min_parallel_size == 7
    finally:
        set_config(nproc=previous.nproc, min_parallel_size=previous.min_parallel_size)
    assert get_config() == previous


def test_config_context_other_thread():
    """A set_config from another thread is not undone on exit"""
    previous = get_config()
    try:
        with config_context(nproc=2):
            thread = threading.Thread(target=set_config, kwargs={"nproc": 5})
            thread.start()
            thread.join()
        assert get_config().nproc == 5
    finally:
        set_config(nproc=previous.nproc)
    assert get_config() == previous
