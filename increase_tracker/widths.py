"""
Integer Widths Module
=====================

Resolution and validation of the fixed-width unsigned types a tracker is
parameterized with.

Design:
- Widths are numpy unsigned integer dtypes (uint8 ... uint64)
- Maxima come from numpy.iinfo, arithmetic stays on Python int
- Signed, float and bool types are rejected eagerly
"""

import operator
from typing import Any, Union

import numpy as np

from increase_tracker.errors import UnsupportedWidth, ValueOutOfRange

WidthLike = Union[str, type, np.dtype]


def resolve_width(width: WidthLike) -> np.dtype:
    """
    Resolve a width argument into an unsigned numpy dtype.

    Args:
        width: numpy scalar type (np.uint8), dtype, or dtype name ("uint16")

    Returns:
        numpy dtype instance

    Raises:
        UnsupportedWidth: If width is not an unsigned fixed-width integer
    """
    try:
        dtype = np.dtype(width)
    except TypeError as e:
        raise UnsupportedWidth(f"Unknown integer width: {width!r}") from e

    if not np.issubdtype(dtype, np.unsignedinteger):
        raise UnsupportedWidth(
            f"Width must be an unsigned integer type, got {dtype.name}"
        )
    return dtype


def width_max(dtype: np.dtype) -> int:
    """Largest value representable by an unsigned dtype."""
    return int(np.iinfo(dtype).max)


def check_value(value: Any, dtype: np.dtype) -> int:
    """
    Coerce a sampled value to int and check it fits the given width.

    Args:
        value: int or numpy integer scalar
        dtype: Width the value must fit into

    Returns:
        The value as a Python int

    Raises:
        ValueOutOfRange: If value is not an integer in [0, max(dtype)]
    """
    maximum = width_max(dtype)

    if isinstance(value, (bool, np.bool_)):
        raise ValueOutOfRange(value, maximum)
    try:
        number = operator.index(value)
    except TypeError:
        raise ValueOutOfRange(value, maximum) from None

    if not 0 <= number <= maximum:
        raise ValueOutOfRange(number, maximum)
    return number
