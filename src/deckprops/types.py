import enum
import typing

import numpy as np
from typing_extensions import TypeAlias


__all__ = [
    "ThreeDimensions",
    "CellIndex",
    "Numeric",
    "BoxBounds",
    "FieldKind",
    "IndexBase",
    "OperateFunction",
    "INTEGER_DTYPE",
]

ThreeDimensions: TypeAlias = typing.Tuple[int, int, int]
"""3D indices"""

CellIndex = typing.Union[int, np.integer, ThreeDimensions]
"""A cell address, either a flat index `g` or an `(i, j, k)` triple."""

Numeric = typing.Union[int, float, np.floating, np.integer]

BoxBounds: TypeAlias = typing.Tuple[int, int, int, int, int, int]
"""Inclusive box bounds `(i1, i2, j1, j2, k1, k2)`."""

IndexBase = typing.Literal[0, 1]
"""Index base used by box items in deck records."""

INTEGER_DTYPE = np.int32
"""Storage type of integer properties (region numbers)."""


class FieldKind(enum.Enum):
    """Scalar kind of a grid property."""

    INTEGER = "integer"
    FLOAT = "float"


OperateFunction = typing.Literal[
    "MULTA",
    "POLY",
    "SLOG",
    "LOG10",
    "LOGE",
    "INV",
    "MULTX",
    "ADDX",
    "COPY",
    "MAXLIM",
    "MINLIM",
    "MAXV",
    "MINV",
    "MULTP",
    "ABS",
    "MULTIPLY",
]
"""
Functions accepted by the `OPERATE` keyword.

With `x` the source cell value, `y` the current target value and
`a`, `b` the alpha and beta items:

- "MULTA": a*x + b
- "POLY": y + a*x**b
- "SLOG": 10**(a + b*x)
- "LOG10": log10(x)
- "LOGE": ln(x)
- "INV": 1/x
- "MULTX": a*x
- "ADDX": x + a
- "COPY": x
- "MAXLIM": min(a, x)
- "MINLIM": max(a, x)
- "MAXV": max(y, x)
- "MINV": min(y, x)
- "MULTP": a*x**b
- "ABS": |x|
- "MULTIPLY": x*y
"""
