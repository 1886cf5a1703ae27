import typing

import attrs
import numpy as np

from deckprops._precision import get_dtype
from deckprops.errors import OutOfBoundsError, TypeMismatchError, ValidationError
from deckprops.grids.extent import GridExtent
from deckprops.types import INTEGER_DTYPE, CellIndex, FieldKind, Numeric

__all__ = ["PropertyField"]


def _dtype_for(kind: FieldKind) -> np.dtype:
    if kind is FieldKind.INTEGER:
        return np.dtype(INTEGER_DTYPE)
    return np.dtype(get_dtype())


@attrs.define(slots=True, eq=False)
class PropertyField:
    """
    Dense per-cell values of a named grid property.

    Values live in a flat array of length `nx*ny*nz`. Element `g` belongs to
    the cell `extent.to_ijk(g)`; the `(i, j, k)` accessors are thin wrappers
    over that mapping. The array is never resized.

    Integer properties (region numbers such as SATNUM) only accept integral
    values. Writing `2.0` stores `2`, writing `2.5` raises `TypeMismatchError`.
    """

    name: str
    """Keyword name of the property, e.g. 'PERMX'."""
    extent: GridExtent
    """Grid extent the values are laid out on."""
    kind: FieldKind
    """Scalar kind of the property."""
    values: np.ndarray = attrs.field(repr=False)
    """Flat array of cell values, `i` varying fastest."""

    @values.validator
    def _check_values(self, attribute, value: np.ndarray) -> None:
        if not isinstance(value, np.ndarray) or value.ndim != 1:
            raise ValidationError(f"{self.name}: values must be a 1-D numpy array")
        if value.shape[0] != self.extent.cell_count:
            raise ValidationError(
                f"{self.name}: expected {self.extent.cell_count} values for grid "
                f"{self.extent}, got {value.shape[0]}"
            )
        if value.dtype != _dtype_for(self.kind) and not (
            self.kind is FieldKind.FLOAT and value.dtype.kind == "f"
        ):
            raise TypeMismatchError(
                f"{self.name}: {self.kind.value} property cannot be stored as {value.dtype}"
            )

    @classmethod
    def full(
        cls,
        name: str,
        extent: GridExtent,
        kind: FieldKind,
        value: Numeric = 0,
    ) -> "PropertyField":
        """
        Create a property with every cell set to `value`.

        :param name: Keyword name of the property
        :param extent: Grid extent
        :param kind: Scalar kind of the property
        :param value: Initial cell value
        :return: New `PropertyField`
        """
        dtype = _dtype_for(kind)
        field = cls(
            name=name,
            extent=extent,
            kind=kind,
            values=np.zeros(extent.cell_count, dtype=dtype),
        )
        field.values[:] = field.coerce(value)
        return field

    @classmethod
    def from_values(
        cls,
        name: str,
        extent: GridExtent,
        kind: FieldKind,
        values: typing.Any,
    ) -> "PropertyField":
        """
        Create a property from existing values.

        Accepts either a flat sequence of `nx*ny*nz` values (i fastest) or an
        array of shape `(nx, ny, nz)`.
        """
        array = np.asarray(values)
        if array.ndim == 3:
            if array.shape != extent.shape:
                raise ValidationError(
                    f"{name}: grid of shape {array.shape} does not match extent {extent.shape}"
                )
            array = array.reshape(-1, order="F")
        field = cls.full(name, extent, kind)
        if array.shape != field.values.shape:
            raise ValidationError(
                f"{name}: expected {extent.cell_count} values for grid {extent}, got {array.size}"
            )
        field.values[:] = field.coerce(array)
        return field

    @property
    def dtype(self) -> np.dtype:
        return self.values.dtype

    @property
    def is_integer(self) -> bool:
        return self.kind is FieldKind.INTEGER

    def __len__(self) -> int:
        return self.values.shape[0]

    def flat_index(self, index: CellIndex) -> int:
        """
        Resolve a flat index or an `(i, j, k)` triple to a flat index.

        :raises OutOfBoundsError: If the address lies outside the grid.
        """
        if isinstance(index, tuple):
            if len(index) != 3:
                raise OutOfBoundsError(
                    f"{self.name}: cell address must be (i, j, k), got {index}"
                )
            return self.extent.to_flat_index(*index)
        if isinstance(index, (bool, np.bool_)) or not isinstance(
            index, (int, np.integer)
        ):
            raise OutOfBoundsError(f"{self.name}: invalid cell index {index!r}")
        g = int(index)
        if not 0 <= g < self.extent.cell_count:
            raise OutOfBoundsError(
                f"{self.name}: flat index {g} is outside [0, {self.extent.cell_count})"
            )
        return g

    def get(self, index: CellIndex) -> Numeric:
        """Return the value of one cell as a Python scalar."""
        return self.values[self.flat_index(index)].item()

    def set(self, index: CellIndex, value: Numeric) -> None:
        """Overwrite the value of one cell."""
        g = self.flat_index(index)
        self.values[g] = self.coerce(value)

    __getitem__ = get
    __setitem__ = set

    def take(self, indices: np.ndarray) -> np.ndarray:
        """
        Return a copy of the values at the given flat indices.

        :param indices: Integer array of flat cell indices
        :return: Values in the same order as `indices`
        """
        self.extent.check_flat_indices(indices)
        return self.values[indices]

    def put(self, indices: np.ndarray, values: typing.Any) -> None:
        """
        Write values at the given flat indices.

        All values are converted before anything is written, so a value that
        the property cannot hold leaves the property untouched.

        :param indices: Integer array of flat cell indices
        :param values: Scalar or array broadcastable to `indices`
        """
        self.extent.check_flat_indices(indices)
        self.values[indices] = self.coerce(values)

    def coerce(self, values: typing.Any) -> np.ndarray:
        """
        Convert values to the storage type of this property.

        :raises TypeMismatchError: If a value is not numeric, or is not
            integral (or not finite, or out of range) for an integer property.
        """
        array = np.asarray(values)
        if array.dtype.kind not in "biuf":
            raise TypeMismatchError(
                f"{self.name}: cannot store non-numeric value(s) of type {array.dtype}"
            )
        if self.kind is FieldKind.FLOAT:
            return array.astype(self.dtype, copy=False)

        if array.dtype.kind == "f":
            if not np.all(np.isfinite(array)):
                raise TypeMismatchError(
                    f"{self.name}: integer property cannot hold non-finite values"
                )
            if np.any(array != np.trunc(array)):
                offending = array[array != np.trunc(array)].flat[0]
                raise TypeMismatchError(
                    f"{self.name}: integer property cannot hold non-integral value {offending}"
                )

        limits = np.iinfo(self.dtype)
        # compared in float64, which holds the storage limits exactly
        real = array.astype(np.float64)
        outside = (real < limits.min) | (real > limits.max)
        if np.any(outside):
            raise TypeMismatchError(
                f"{self.name}: value {array[outside].flat[0]} is outside the "
                f"{self.dtype} range [{limits.min}, {limits.max}]"
            )
        return array.astype(self.dtype, copy=False)

    def as_grid(self) -> np.ndarray:
        """
        View the values as an `(nx, ny, nz)` array.

        The view shares memory with the property, writes go through.
        """
        return self.values.reshape(self.extent.shape, order="F")

    def copy(self, name: typing.Optional[str] = None) -> "PropertyField":
        """Return an independent copy, optionally under a new name."""
        return type(self)(
            name=name or self.name,
            extent=self.extent,
            kind=self.kind,
            values=self.values.copy(),
        )
