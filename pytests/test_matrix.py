import io

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from parmat import (
    DimensionMismatch,
    ErrorKind,
    InvalidLength,
    InvalidShape,
    Matrix,
    MatrixError,
    RaggedRows,
)

par1 = {"ny": 2, "nx": 3}  # wide
par2 = {"ny": 4, "nx": 1}  # column
par3 = {"ny": 5, "nx": 5}  # square


def test_Matrix_default_is_empty():
    """Default construction gives the empty 0x0 matrix"""
    m = Matrix()
    assert m.row_count() == 0
    assert m.col_count() == 0
    assert m.shape == (0, 0)
    assert m.size == 0
    assert m.format() == ""


@pytest.mark.parametrize("par", [(par1), (par2), (par3)])
def test_Matrix_zero_filled(par):
    """Dimension constructor fills with zeros"""
    m = Matrix(par["ny"], par["nx"])
    assert m.rows == par["ny"]
    assert m.cols == par["nx"]
    assert m.size == par["ny"] * par["nx"]
    assert_array_equal(m.to_numpy(), np.zeros((par["ny"], par["nx"])))


def test_Matrix_from_values_row_major():
    """Flat values are laid out in row-major order"""
    m = Matrix(2, 3, [1, 2, 3, 4, 5, 6])
    assert m.shape == (2, 3)
    assert m[0, 0] == 1
    assert m[1, 2] == 6
    for i in range(2):
        for j in range(3):
            assert m.get(i, j) == i * 3 + j + 1


def test_Matrix_from_rows():
    """Nested rows construction"""
    m = Matrix.from_rows([[1, 2, 3], [4, 5, 6]])
    assert m.rows == 2
    assert m.cols == 3
    assert m[0, 0] == 1
    assert m[1, 2] == 6
    assert m == Matrix(2, 3, [1, 2, 3, 4, 5, 6])


def test_Matrix_copies_input():
    """Constructors do not alias the caller's data"""
    values = np.arange(6, dtype=np.float64)
    m = Matrix(2, 3, values)
    values[0] = 100.0
    assert m[0, 0] == 0.0

    array = np.ones((2, 2))
    m = Matrix.from_numpy(array)
    array[1, 1] = 5.0
    assert m[1, 1] == 1.0


@pytest.mark.parametrize(
    "rows, cols",
    [
        (0, 5),
        (5, 0),
        (-1, 3),
        (3, None),
        (None, 3),
        (0, 0),
        (2.5, 3),
        (3, 2.0),
        (3, "4"),
        (True, 3),
    ],
)
def test_Matrix_invalid_shape(rows, cols):
    """Non-positive or non-integer dimensions are rejected"""
    with pytest.raises(InvalidShape, match="must be positive integers"):
        Matrix(rows, cols)
    if rows is not None and cols is not None:
        with pytest.raises(InvalidShape, match="must be positive integers"):
            Matrix.random(rows, cols)


def test_Matrix_numpy_integer_shape():
    m = Matrix(np.int64(2), np.int32(3))
    assert m.shape == (2, 3)
    assert isinstance(m.rows, int)
    assert Matrix.random(np.int64(4), 2, seed=0).shape == (4, 2)


def test_Matrix_invalid_length():
    """Wrong number of flat values is rejected"""
    with pytest.raises(InvalidLength, match="Incorrect number of values"):
        Matrix(2, 3, [1, 2, 3, 4, 5])
    with pytest.raises(InvalidLength):
        Matrix(2, 2, [[1, 2], [3, 4]])


def test_Matrix_from_rows_invalid():
    """Empty and ragged nested sequences are rejected"""
    with pytest.raises(InvalidShape):
        Matrix.from_rows([])
    with pytest.raises(InvalidShape):
        Matrix.from_rows([[]])
    with pytest.raises(RaggedRows, match="same length"):
        Matrix.from_rows([[1, 2], [3, 4, 5]])


def test_Matrix_from_numpy_invalid():
    with pytest.raises(InvalidShape, match="2-dimensional"):
        Matrix.from_numpy(np.ones(4))


def test_error_kinds():
    """Every validation error carries its kind and is a ValueError"""
    errors = {
        InvalidShape: ErrorKind.INVALID_SHAPE,
        InvalidLength: ErrorKind.INVALID_LENGTH,
        RaggedRows: ErrorKind.RAGGED_ROWS,
        DimensionMismatch: ErrorKind.DIMENSION_MISMATCH,
    }
    for error, kind in errors.items():
        assert issubclass(error, MatrixError)
        assert issubclass(error, ValueError)
        assert error.kind is kind

    with pytest.raises(MatrixError) as excinfo:
        Matrix.from_rows([[1, 2], [3, 4, 5]])
    assert excinfo.value.kind is ErrorKind.RAGGED_ROWS


def test_Matrix_element_access():
    """Get and set through methods and indexing"""
    m = Matrix.from_rows([[1, 2, 3], [4, 5, 6]])
    assert m[0, 1] == 2
    m[0, 0] = 10
    assert m[0, 0] == 10
    m.set(1, 2, -3.5)
    assert m.get(1, 2) == -3.5
    assert isinstance(m.get(0, 0), float)


@pytest.mark.parametrize("index", [(2, 0), (0, 3), (-1, 0), (0, -1)])
def test_Matrix_out_of_bounds(index):
    """Out-of-range access is a precondition violation"""
    m = Matrix(2, 3)
    with pytest.raises(AssertionError, match="out of range"):
        m[index]
    with pytest.raises(AssertionError):
        m.set(*index, 1.0)


def test_Matrix_format():
    """Rows rendered as fixed-point values of width 8 in brackets"""
    m = Matrix.from_rows([[1.5, 2.7, 3.14159], [4.0, 5.5, 6.9]])
    expected = "[    1.50     2.70     3.14]\n[    4.00     5.50     6.90]\n"
    assert m.format() == expected
    assert str(m) == expected

    buffer = io.StringIO()
    m.print(file=buffer)
    assert buffer.getvalue() == expected


def test_Matrix_format_wide_values():
    """Values wider than the field are not truncated"""
    m = Matrix.from_rows([[-1234567.891, 0.0]])
    assert m.format() == "[-1234567.89     0.00]\n"


def test_Matrix_repr():
    assert repr(Matrix(2, 3)) == "<2x3 Matrix with dtype=float64>"


def test_Matrix_equality():
    a = Matrix.from_rows([[1, 2], [3, 4]])
    assert a == a.copy()
    assert a != Matrix.from_rows([[1, 2, 3, 4]])
    assert a != Matrix.from_rows([[1, 2], [3, 5]])
    assert a.allclose(Matrix.from_rows([[1, 2], [3, 4 + 1e-13]]))
    assert not a.allclose(Matrix.from_rows([[1, 2], [3, 4.1]]))
    with pytest.raises(TypeError):
        hash(a)


def test_Matrix_random():
    """Random matrices are reproducible and bounded"""
    a = Matrix.random(10, 20, low=-1.0, high=1.0, seed=10)
    b = Matrix.random(10, 20, low=-1.0, high=1.0, seed=10)
    assert a == b
    values = a.to_numpy()
    assert values.min() >= -1.0
    assert values.max() < 1.0
    with pytest.raises(InvalidShape):
        Matrix.random(0, 3)
