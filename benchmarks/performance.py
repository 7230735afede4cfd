import logging
import sys
import time
from argparse import ArgumentParser

from parmat import Matrix, available_parallelism, get_config, set_config


def check_basics():
    m1 = Matrix.from_rows([[1, 2], [3, 4]])
    m2 = Matrix.from_rows([[5, 6], [7, 8]])
    assert m1 + m2 == Matrix.from_rows([[6, 8], [10, 12]])
    assert m1 * m2 == Matrix.from_rows([[19, 22], [43, 50]])
    assert m1.transpose() == Matrix.from_rows([[1, 3], [2, 4]])
    print("Basic tests passed!\n")


def timeit(func):
    t0 = time.perf_counter()
    func()
    return (time.perf_counter() - t0) * 1000.0


def main(sequential, sizes):
    parallel = False if sequential else None
    print(f"Hardware threads available: {available_parallelism()}")
    print(f"Config: {get_config()}\n")

    for size in sizes:
        print(f"Testing {size}x{size} matrices:")
        m1 = Matrix.random(size, size)
        m2 = Matrix.random(size, size)

        add_time = timeit(lambda: m1.add(m2, parallel=parallel))
        mult_time = timeit(lambda: m1.multiply(m2, parallel=parallel))
        transpose_time = timeit(lambda: m1.transpose(parallel=parallel))

        print(f"  Addition:       {add_time:.2f} ms")
        print(f"  Multiplication: {mult_time:.2f} ms")
        print(f"  Transpose:      {transpose_time:.2f} ms")
        print(f"  Total:          {add_time + mult_time + transpose_time:.2f} ms\n")

    print("Testing rectangular matrices (500x200 * 200x300):")
    rect1 = Matrix.random(500, 200)
    rect2 = Matrix.random(200, 300)
    rect_time = timeit(lambda: rect1.multiply(rect2, parallel=parallel))
    print(f"  Rectangular multiplication: {rect_time:.2f} ms\n")


if __name__ == "__main__":
    if hasattr(sys, "_is_gil_enabled"):
        print("Use GIL:", sys._is_gil_enabled())
    parser = ArgumentParser(description="Time parmat matrix operations.")
    parser.add_argument(
        "--sequential",
        action="store_true",
        default=False,
        help="Force the sequential path.",
    )
    parser.add_argument(
        "--engine",
        choices=["numpy", "numba"],
        default="numpy",
        help="Kernel engine.",
    )
    parser.add_argument(
        "--nproc",
        type=int,
        default=None,
        help="Worker-count ceiling (default: available parallelism).",
    )
    parser.add_argument(
        "--sizes",
        type=int,
        nargs="+",
        default=[50, 100, 200, 400, 800],
        help="Sizes of the square matrices.",
    )
    parser.add_argument("--verbose", action="store_true", default=False)
    args = parser.parse_args()

    logging.basicConfig(
        format="%(levelname)s: %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )
    changes = {"engine": args.engine}
    if args.nproc is not None:
        changes["nproc"] = args.nproc
    set_config(**changes)

    print("=== Matrix Performance Test ===\n")
    check_basics()
    main(args.sequential, args.sizes)
    print("=== Performance Test Complete ===")
