__all__ = ["Matrix"]

import numbers
import sys
from typing import Optional, Sequence, TextIO, Tuple

import numpy as np

from parmat.errors import InvalidLength, InvalidShape, RaggedRows
from parmat.parallel import dispatch
from parmat.utils.typing import ArrayLike, NDArray, ShapeLike


def _check_shape(rows, cols) -> None:
    for dim in (rows, cols):
        if (
            isinstance(dim, bool)
            or not isinstance(dim, numbers.Integral)
            or dim <= 0
        ):
            raise InvalidShape(
                "Matrix dimensions must be positive integers, "
                f"got rows={rows!r}, cols={cols!r}"
            )


class Matrix:
    r"""Dense, row-major matrix of 64-bit floats.

    Values are stored in one flat contiguous buffer, element
    :math:`(i, j)` living at offset :math:`i \cdot n_{cols} + j`. The shape
    is fixed at construction; element values can be changed in place.
    Arithmetic never modifies its operands and always returns a new matrix.

    Parameters
    ----------
    rows : :obj:`int`, optional
        Number of rows. If both ``rows`` and ``cols`` are omitted, the
        empty :math:`0 \times 0` matrix is created.
    cols : :obj:`int`, optional
        Number of columns
    values : :obj:`list` or :obj:`numpy.ndarray`, optional
        Flat sequence of ``rows * cols`` values in row-major order. If
        ``None``, the matrix is filled with zeros.

    Attributes
    ----------
    rows : :obj:`int`
        Number of rows
    cols : :obj:`int`
        Number of columns
    shape : :obj:`tuple`
        ``(rows, cols)``

    Raises
    ------
    InvalidShape
        If ``rows`` or ``cols`` are not positive
    InvalidLength
        If ``values`` does not hold exactly ``rows * cols`` values

    Notes
    -----
    Addition, subtraction, multiplication and transpose run sequentially
    on small matrices and fork-join over a bounded set of worker threads on
    large ones (see :mod:`parmat.parallel`). The parallel path splits the
    output into disjoint ranges (flat elements for addition and
    subtraction, output rows for multiplication, input rows for transpose)
    so workers never write the same slot.

    Each entry of the product is accumulated in increasing :math:`k`

    .. math::
        c_{ij} = \sum_{k=0}^{n-1} a_{ik} b_{kj}

    both sequentially and in parallel.

    Examples
    --------
    >>> a = Matrix.from_rows([[1, 2], [3, 4]])
    >>> b = Matrix.from_rows([[5, 6], [7, 8]])
    >>> print(a * b)
    [   19.00    22.00]
    [   43.00    50.00]

    """

    def __init__(
        self,
        rows: Optional[int] = None,
        cols: Optional[int] = None,
        values: Optional[ArrayLike] = None,
    ) -> None:
        if rows is None and cols is None and values is None:
            self._rows, self._cols = 0, 0
            self._data = np.zeros(0, dtype=np.float64)
            return
        _check_shape(rows, cols)
        self._rows, self._cols = int(rows), int(cols)
        if values is None:
            self._data = np.zeros(self._rows * self._cols, dtype=np.float64)
            return
        data = np.array(values, dtype=np.float64)
        if data.ndim != 1 or data.size != self._rows * self._cols:
            raise InvalidLength(
                f"Incorrect number of values: expected {self._rows * self._cols} "
                f"in a flat sequence, got shape {data.shape}"
            )
        self._data = data

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> "Matrix":
        """Create a matrix from a sequence of rows.

        Parameters
        ----------
        rows : :obj:`list`
            Sequence of rows, each a sequence of values

        Returns
        -------
        matrix : :obj:`parmat.Matrix`
            Matrix of shape ``(len(rows), len(rows[0]))``

        Raises
        ------
        InvalidShape
            If ``rows`` or its first row is empty
        RaggedRows
            If rows have different lengths

        """
        if len(rows) == 0:
            raise InvalidShape("Matrix dimensions must be positive, got no rows")
        ncols = len(rows[0])
        if ncols == 0:
            raise InvalidShape("Matrix dimensions must be positive, got empty rows")
        for irow, row in enumerate(rows):
            if len(row) != ncols:
                raise RaggedRows(
                    f"All rows must have the same length: row 0 has {ncols} "
                    f"values, row {irow} has {len(row)}"
                )
        values = [value for row in rows for value in row]
        return cls(len(rows), ncols, values)

    @classmethod
    def from_numpy(cls, array: NDArray) -> "Matrix":
        """Create a matrix from (a copy of) a 2-dimensional array."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise InvalidShape(f"array must be 2-dimensional, got {array.ndim}")
        return cls(array.shape[0], array.shape[1], array.ravel())

    @classmethod
    def random(
        cls,
        rows: int,
        cols: int,
        low: float = -10.0,
        high: float = 10.0,
        seed: Optional[int] = None,
    ) -> "Matrix":
        """Matrix of values drawn uniformly from ``[low, high)``."""
        _check_shape(rows, cols)
        rows, cols = int(rows), int(cols)
        rng = np.random.default_rng(seed)
        return cls._from_buffer(rng.uniform(low, high, rows * cols), rows, cols)

    @classmethod
    def _from_buffer(cls, buffer: NDArray, rows: int, cols: int) -> "Matrix":
        # takes ownership of buffer, which nobody else references
        matrix = cls.__new__(cls)
        matrix._rows, matrix._cols = rows, cols
        matrix._data = buffer.reshape(-1)
        if matrix._data.size != rows * cols:
            raise InvalidLength(
                f"buffer of {matrix._data.size} values for a {rows}x{cols} matrix"
            )
        return matrix

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def shape(self) -> ShapeLike:
        return self._rows, self._cols

    @property
    def size(self) -> int:
        return self._data.size

    def row_count(self) -> int:
        return self._rows

    def col_count(self) -> int:
        return self._cols

    def _offset(self, i: int, j: int) -> int:
        assert (
            0 <= i < self._rows and 0 <= j < self._cols
        ), f"index ({i}, {j}) out of range for {self._rows}x{self._cols} matrix"
        return i * self._cols + j

    def get(self, i: int, j: int) -> float:
        return float(self._data[self._offset(i, j)])

    def set(self, i: int, j: int, value: float) -> None:
        self._data[self._offset(i, j)] = value

    def __getitem__(self, index: Tuple[int, int]) -> float:
        i, j = index
        return self.get(i, j)

    def __setitem__(self, index: Tuple[int, int], value: float) -> None:
        i, j = index
        self.set(i, j, value)

    def _array(self) -> NDArray:
        """2-dimensional view of the buffer."""
        return self._data.reshape(self._rows, self._cols)

    def to_numpy(self) -> NDArray:
        """Copy of the values as a 2-dimensional array."""
        return self._array().copy()

    def copy(self) -> "Matrix":
        return Matrix._from_buffer(self._data.copy(), self._rows, self._cols)

    def add(
        self,
        other: "Matrix",
        *,
        parallel: Optional[bool] = None,
        nproc: Optional[int] = None,
    ) -> "Matrix":
        """Element-wise sum.

        Parameters
        ----------
        other : :obj:`parmat.Matrix`
            Matrix of the same shape
        parallel : :obj:`bool`, optional
            Force the parallel (``True``) or sequential (``False``) path.
            If ``None``, it runs in parallel when ``rows * cols`` reaches
            ``min_parallel_size``.
        nproc : :obj:`int`, optional
            Worker-count ceiling. Defaults to the process-wide setting.

        Returns
        -------
        result : :obj:`parmat.Matrix`
            New matrix

        Raises
        ------
        DimensionMismatch
            If shapes differ

        """
        out = dispatch.elementwise(
            "add", self._array(), other._array(), parallel=parallel, nproc=nproc
        )
        return Matrix._from_buffer(out, *out.shape)

    def subtract(
        self,
        other: "Matrix",
        *,
        parallel: Optional[bool] = None,
        nproc: Optional[int] = None,
    ) -> "Matrix":
        """Element-wise difference. Same arguments and errors as :meth:`add`."""
        out = dispatch.elementwise(
            "subtract", self._array(), other._array(), parallel=parallel, nproc=nproc
        )
        return Matrix._from_buffer(out, *out.shape)

    def multiply(
        self,
        other: "Matrix",
        *,
        parallel: Optional[bool] = None,
        nproc: Optional[int] = None,
    ) -> "Matrix":
        """Matrix product.

        Parameters
        ----------
        other : :obj:`parmat.Matrix`
            Matrix with as many rows as ``self`` has columns
        parallel : :obj:`bool`, optional
            Force the parallel (``True``) or sequential (``False``) path.
            If ``None``, it runs in parallel when ``self.rows`` or
            ``other.cols`` reaches ``min_parallel_size``.
        nproc : :obj:`int`, optional
            Worker-count ceiling. Defaults to the process-wide setting.

        Returns
        -------
        result : :obj:`parmat.Matrix`
            New matrix of shape ``(self.rows, other.cols)``

        Raises
        ------
        DimensionMismatch
            If ``self.cols != other.rows``

        """
        out = dispatch.matmul(
            self._array(), other._array(), parallel=parallel, nproc=nproc
        )
        return Matrix._from_buffer(out, *out.shape)

    def transpose(
        self,
        *,
        parallel: Optional[bool] = None,
        nproc: Optional[int] = None,
    ) -> "Matrix":
        """Transpose, a new matrix of shape ``(cols, rows)``.

        Runs in parallel when ``rows`` or ``cols`` reaches
        ``min_parallel_size``, unless forced through ``parallel``.

        """
        out = dispatch.transpose(self._array(), parallel=parallel, nproc=nproc)
        return Matrix._from_buffer(out, *out.shape)

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    def __add__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.multiply(other)

    def __matmul__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.multiply(other)

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def allclose(self, other: "Matrix", rtol: float = 1e-9, atol: float = 1e-12) -> bool:
        """Same shape and values equal within tolerance."""
        return self.shape == other.shape and bool(
            np.allclose(self._data, other._data, rtol=rtol, atol=atol)
        )

    def format(self) -> str:
        """One line per row, values as ``%8.2f`` joined by spaces in brackets."""
        lines = []
        for row in self._array():
            lines.append("[" + " ".join(f"{value:8.2f}" for value in row) + "]\n")
        return "".join(lines)

    def print(self, file: Optional[TextIO] = None) -> None:
        (file or sys.stdout).write(self.format())

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"<{self._rows}x{self._cols} Matrix with dtype=float64>"
