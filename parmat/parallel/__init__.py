"""
Parallel execution
==================

The subpackage parallel provides the fork-join machinery shared by all
matrix operations.

A list of routines present in parmat.parallel:

    partition                       Split a workload into contiguous ranges.
    worker_count                    Number of workers for a workload.
    split                           Disjoint output views, one per range.
    parallel_map                    Fork-join of range workers.
    use_parallel                    Sequential/parallel threshold policy.
    elementwise                     Element-wise addition and subtraction.
    matmul                          Matrix product.
    transpose                       Transpose.

"""

from .partition import *
from .dispatch import *

__all__ = [
    "partition",
    "worker_count",
    "split",
    "parallel_map",
    "use_parallel",
    "elementwise",
    "matmul",
    "transpose",
]
