__all__ = [
    "ErrorKind",
    "MatrixError",
    "InvalidShape",
    "InvalidLength",
    "RaggedRows",
    "DimensionMismatch",
]

from enum import Enum


class ErrorKind(Enum):
    """Recoverable failure kinds of matrix construction and arithmetic."""

    INVALID_SHAPE = "invalid_shape"
    INVALID_LENGTH = "invalid_length"
    RAGGED_ROWS = "ragged_rows"
    DIMENSION_MISMATCH = "dimension_mismatch"


class MatrixError(ValueError):
    """Base class of all validation errors raised by :mod:`parmat`.

    Subclasses :class:`ValueError`, so callers that only care about bad
    input can keep catching that. The failure kind is available as
    ``err.kind``.

    """

    kind: ErrorKind


class InvalidShape(MatrixError):
    """Non-positive or empty dimensions at construction."""

    kind = ErrorKind.INVALID_SHAPE


class InvalidLength(MatrixError):
    """Number of flat values differs from ``rows * cols``."""

    kind = ErrorKind.INVALID_LENGTH


class RaggedRows(MatrixError):
    """Rows of a nested sequence have unequal lengths."""

    kind = ErrorKind.RAGGED_ROWS


class DimensionMismatch(MatrixError):
    """Operand shapes are incompatible for the requested operation."""

    kind = ErrorKind.DIMENSION_MISMATCH
