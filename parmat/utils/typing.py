__all__ = [
    "NDArray",
    "ArrayLike",
    "RangeLike",
    "ShapeLike",
    "EngineLike",
]

from typing import Literal, Tuple

import numpy.typing as npt

NDArray = npt.NDArray
ArrayLike = npt.ArrayLike

RangeLike = Tuple[int, int]
ShapeLike = Tuple[int, int]
EngineLike = Literal["numpy", "numba"]
