import typing

import attrs
import numpy as np

from deckprops.errors import OutOfBoundsError, ValidationError
from deckprops.types import ThreeDimensions

__all__ = ["GridExtent"]


def _is_integer(value: typing.Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(
        value, (bool, np.bool_)
    )


@attrs.frozen(slots=True)
class GridExtent:
    """
    Cell counts of a structured grid along x, y and z.

    Owns the bijection between `(i, j, k)` addresses and flat cell
    indices, with `i` varying fastest:

        g = i + j*nx + k*nx*ny

    Every other addressing helper in the package goes through this class
    so that flat and 3D addressing can never disagree.
    """

    nx: int = attrs.field(converter=int, validator=attrs.validators.gt(0))
    """Number of cells in the x direction."""
    ny: int = attrs.field(converter=int, validator=attrs.validators.gt(0))
    """Number of cells in the y direction."""
    nz: int = attrs.field(converter=int, validator=attrs.validators.gt(0))
    """Number of cells in the z direction."""

    @classmethod
    def from_shape(cls, shape: typing.Sequence[int]) -> "GridExtent":
        """
        Build an extent from an `(nx, ny, nz)` sequence.

        :param shape: Number of cells along x, y and z.
        :return: `GridExtent` instance
        """
        if len(shape) != 3:
            raise ValidationError(
                f"Grid shape must have exactly three dimensions, got {tuple(shape)}"
            )
        return cls(*shape)

    @property
    def shape(self) -> ThreeDimensions:
        """The `(nx, ny, nz)` triple."""
        return (self.nx, self.ny, self.nz)

    @property
    def cell_count(self) -> int:
        """Total number of cells, `nx*ny*nz`."""
        return self.nx * self.ny * self.nz

    def contains(self, i: int, j: int, k: int) -> bool:
        """Check whether `(i, j, k)` addresses a cell of the grid."""
        return (
            all(_is_integer(index) for index in (i, j, k))
            and 0 <= i < self.nx
            and 0 <= j < self.ny
            and 0 <= k < self.nz
        )

    def to_flat_index(self, i: int, j: int, k: int) -> int:
        """
        Convert a 0-based `(i, j, k)` address to a flat cell index.

        :raises OutOfBoundsError: If the address lies outside the grid.
        """
        for axis, index in zip("ijk", (i, j, k)):
            if not _is_integer(index):
                raise OutOfBoundsError(
                    f"Cell index {axis} must be an integer, got {index!r}"
                )
        if not self.contains(i, j, k):
            raise OutOfBoundsError(
                f"Cell ({i}, {j}, {k}) is outside grid extent {self.shape}"
            )
        return int(i) + int(j) * self.nx + int(k) * self.nx * self.ny

    def to_ijk(self, g: int) -> ThreeDimensions:
        """
        Convert a flat cell index back to its `(i, j, k)` address.

        :raises OutOfBoundsError: If the index is not in `[0, cell_count)`.
        """
        if not 0 <= g < self.cell_count:
            raise OutOfBoundsError(
                f"Flat index {g} is outside [0, {self.cell_count}) for grid {self.shape}"
            )
        g = int(g)
        layer = self.nx * self.ny
        k, rest = divmod(g, layer)
        j, i = divmod(rest, self.nx)
        return (i, j, k)

    def check_flat_indices(self, indices: np.ndarray) -> None:
        """
        Validate an array of flat indices in one pass.

        :raises OutOfBoundsError: If any index is outside `[0, cell_count)`.
        """
        if indices.size == 0:
            return
        low, high = int(indices.min()), int(indices.max())
        if low < 0 or high >= self.cell_count:
            bad = low if low < 0 else high
            raise OutOfBoundsError(
                f"Flat index {bad} is outside [0, {self.cell_count}) for grid {self.shape}"
            )

    def __str__(self) -> str:
        return f"{self.nx}x{self.ny}x{self.nz}"
