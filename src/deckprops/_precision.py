from contextlib import contextmanager
from contextvars import ContextVar

import numpy as np
import numpy.typing as npt


__all__ = [
    "get_dtype",
    "set_dtype",
    "with_precision",
    "use_64bit_precision",
    "use_32bit_precision",
    "get_floating_point_info",
]

_deckprops_dtype: ContextVar[npt.DTypeLike] = ContextVar(
    "_deckprops_dtype", default=np.float64
)


def get_dtype() -> npt.DTypeLike:
    """
    Get the current data type used for floating point properties.

    :return: The current data type.
    """
    return _deckprops_dtype.get()


def set_dtype(dtype: npt.DTypeLike) -> None:
    """
    Set the data type used for newly created floating point properties.

    Only affects the current context.

    :param dtype: The data type to set as default.
    """
    if not np.issubdtype(np.dtype(dtype), np.floating):
        raise ValueError(f"Property precision must be a floating dtype, got {dtype!r}")
    _deckprops_dtype.set(dtype)


@contextmanager
def with_precision(dtype: npt.DTypeLike):
    """
    Context manager to temporarily set the floating point precision of new properties.

    :param dtype: The data type to set within the context.
    """
    if not np.issubdtype(np.dtype(dtype), np.floating):
        raise ValueError(f"Property precision must be a floating dtype, got {dtype!r}")
    token = _deckprops_dtype.set(dtype)
    try:
        yield
    finally:
        _deckprops_dtype.reset(token)


def use_64bit_precision() -> None:
    """
    Set the default data type to float64.

    Default precision for deckprops.
    """
    set_dtype(np.float64)


def use_32bit_precision() -> None:
    """
    Set the default data type to float32.
    """
    set_dtype(np.float32)


def get_floating_point_info() -> np.finfo:
    """
    Get the floating point information for the current property data type.

    :return: The floating point information.
    """
    return np.finfo(get_dtype())
