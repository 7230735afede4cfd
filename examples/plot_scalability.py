"""
Scalability of the parallel path
================================
This example shows how to perform a scalability test of the parallel path
of :class:`parmat.Matrix` operations, which fork ``concurrent.futures``
threads over disjoint ranges of the output.

We will consider the matrix product, partitioned by output rows, and the
transpose, partitioned by input rows.
"""
import matplotlib.pyplot as plt

import parmat
from parmat.utils.multiproc import scalability_test

plt.close("all")

###############################################################################
# Let's start by creating two random square matrices
N = 300
A = parmat.Matrix.random(N, N, seed=0)
B = parmat.Matrix.random(N, N, seed=1)

###############################################################################
# We can now perform a scalability test on the product
workers = [1, 2, 3, 4]
compute_times, speedup = scalability_test("multiply", A, B, workers=workers)
plt.figure(figsize=(12, 3))
plt.plot(workers, speedup, "ko-")
plt.xlabel("# Workers")
plt.ylabel("Speed Up")
plt.title("Multiply scalability test")
plt.tight_layout()

###############################################################################
# And likewise on the transpose
compute_times, speedup = scalability_test("transpose", A, workers=workers, ntimes=10)
plt.figure(figsize=(12, 3))
plt.plot(workers, speedup, "ko-")
plt.xlabel("# Workers")
plt.ylabel("Speed Up")
plt.title("Transpose scalability test")
plt.tight_layout()

###############################################################################
# With the default ``numpy`` engine the kernels release the GIL only
# inside each vectorized call, so speedups stay modest. Setting
# ``parmat.set_config(engine="numba")`` (when numba is installed) runs
# compiled kernels without the GIL for the whole range.
