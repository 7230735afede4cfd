"""
parmat
======

Dense, row-major float64 matrices whose arithmetic switches from a
sequential to a fork-join parallel path on large inputs.

A list of objects present in parmat:

    Matrix                          Dense row-major matrix.
    ParallelConfig                  Parallel execution settings.
    get_config                      Current process-wide setting.
    set_config                      Replace the process-wide setting.
    config_context                  Temporarily replace the setting.
    available_parallelism           CPUs usable by this process.
    MatrixError                     Base of the validation errors.
    InvalidShape                    Non-positive or empty dimensions.
    InvalidLength                   Wrong number of flat values.
    RaggedRows                      Rows of unequal lengths.
    DimensionMismatch               Incompatible operand shapes.

Subpackages:

    parmat.parallel                 Partitioning and fork-join machinery.
    parmat.utils                    Optional dependencies, scalability test.

"""

from .config import *
from .errors import *
from .matrix import *

__version__ = "0.1.0"
